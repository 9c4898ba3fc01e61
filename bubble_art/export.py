#!/usr/bin/env python3
# bubble_art/export.py
"""
High-resolution export of a stored color grid.

The grid is re-rendered at base_block_size * quality multiplier onto an
opaque white surface. Rows are drawn in the order they were built; progress
is reported per row into the second half of the overall scale, with a yield
after every report. Cancellation is polled at each row.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import numpy as np
from PIL import Image

from bubble_art.errors import ConversionCancelled, EmptyGridError
from bubble_art.grid import (
    CancelCheck,
    ProgressCb,
    YieldFn,
    default_updates,
    progress_step,
    yield_to_loop,
)
from bubble_art.model import CapabilityTier, ColorGrid, QualityLevel, grid_shape
from bubble_art.rendering.bubble import EXPORT_STYLE, render_bubble

__all__ = ["render_export", "export_block_size", "MAX_ROWS_PER_REPORT"]

log = logging.getLogger(__name__)

MAX_ROWS_PER_REPORT = 10


def export_block_size(base_block_size: int, quality: QualityLevel, tier: CapabilityTier) -> int:
    if base_block_size < 1:
        raise ValueError("base_block_size must be >= 1")
    return base_block_size * QualityLevel.parse(quality).multiplier(tier)


async def render_export(
    grid: ColorGrid,
    quality: QualityLevel,
    tier: CapabilityTier,
    on_progress: Optional[ProgressCb] = None,
    is_cancelled: Optional[CancelCheck] = None,
    *,
    base_block_size: int,
    progress_range: Tuple[float, float] = (0.5, 1.0),
    progress_updates: Optional[int] = None,
    yield_control: Optional[YieldFn] = None,
) -> Image.Image:
    """
    Render every grid cell as an export-style bubble and return an RGB image.

    Raises EmptyGridError before allocating anything when the grid is empty,
    and ConversionCancelled when `is_cancelled()` turns true between rows.
    """
    cols, rows = grid_shape(grid)
    if cols == 0:
        log.error("Pixel data is empty or malformed, cannot render export.")
        raise EmptyGridError("No pixel data to render for export.")

    size = export_block_size(base_block_size, quality, tier)
    pause = yield_control or yield_to_loop
    start, end = progress_range
    span = end - start
    row_freq = min(MAX_ROWS_PER_REPORT, progress_step(rows, progress_updates or default_updates(tier)))

    log.info("Rendering export %dx%d px (block %dpx, quality %s).",
             cols * size, rows * size, size, QualityLevel.parse(quality).value)
    surface = np.full((rows * size, cols * size, 3), 255, dtype=np.uint8)
    radius = size / 2 + EXPORT_STYLE.radius_pad

    for gy, row in enumerate(grid):
        if is_cancelled and is_cancelled():
            log.info("Export cancelled at row %d.", gy)
            raise ConversionCancelled()

        cy = gy * size + size / 2
        for gx, color in enumerate(row):
            render_bubble(surface, gx * size + size / 2, cy, radius, color, EXPORT_STYLE)

        done = gy + 1
        if done % row_freq == 0 or done == rows:
            if on_progress:
                on_progress(start + span * done / rows)
            await pause()

    log.info("High-resolution export rendered.")
    return Image.fromarray(surface)
