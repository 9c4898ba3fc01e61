#!/usr/bin/env python3
# bubble_art/rendering/preview.py
"""Low-resolution preview of a color grid, one bubble per block."""

from __future__ import annotations

import numpy as np
from PIL import Image

from bubble_art.errors import EmptyGridError
from bubble_art.model import ColorGrid, grid_shape
from bubble_art.rendering.bubble import PREVIEW_STYLE, render_bubble

__all__ = ["render_preview"]


def render_preview(grid: ColorGrid, block_size: int) -> Image.Image:
    """Render the grid at its native block size on a white background."""
    cols, rows = grid_shape(grid)
    if cols == 0:
        raise EmptyGridError("No grid to preview.")
    if block_size < 1:
        raise ValueError("block_size must be >= 1")

    surface = np.full((rows * block_size, cols * block_size, 3), 255, dtype=np.uint8)
    radius = block_size / 2 + PREVIEW_STYLE.radius_pad
    for gy, row in enumerate(grid):
        for gx, color in enumerate(row):
            cx = gx * block_size + block_size / 2
            cy = gy * block_size + block_size / 2
            render_bubble(surface, cx, cy, radius, color, PREVIEW_STYLE)
    return Image.fromarray(surface)
