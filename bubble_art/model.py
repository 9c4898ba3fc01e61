#!/usr/bin/env python3
# bubble_art/model.py
"""
Core value types shared by the sampler, grid builder and renderers.

- PixelBuffer: immutable RGBA view over decoded image data.
- Color: opaque 8-bit RGB triple.
- ColorGrid: row-major list of rows of Color.
- CapabilityTier / QualityLevel: explicit knobs, never detected here.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, NamedTuple, Tuple, Union

from PIL import Image

__all__ = [
    "PixelBuffer",
    "Color",
    "BLACK",
    "ColorGrid",
    "SampleCacheKey",
    "CapabilityTier",
    "QualityLevel",
    "grid_shape",
]

CHANNELS = 4


class Color(NamedTuple):
    r: int
    g: int
    b: int

    def to_hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


BLACK = Color(0, 0, 0)

ColorGrid = List[List[Color]]
SampleCacheKey = Tuple[int, int, int]    # (origin_x, origin_y, block_size)


@dataclass(frozen=True)
class PixelBuffer:
    """Decoded image pixels, 4 bytes (R, G, B, A) per pixel, row-major."""
    width: int
    height: int
    data: bytes

    @classmethod
    def from_image(cls, img: Image.Image) -> "PixelBuffer":
        if img.mode != "RGBA":
            img = img.convert("RGBA")
        return cls(img.width, img.height, img.tobytes())

    @classmethod
    def solid(cls, width: int, height: int, color: Tuple[int, int, int], alpha: int = 255) -> "PixelBuffer":
        """Uniform buffer, mostly useful for previews and tests."""
        r, g, b = color
        return cls(width, height, bytes((r, g, b, alpha)) * (width * height))


class CapabilityTier(str, Enum):
    """Coarse host classification; controls sampling density and quality caps."""
    CONSTRAINED = "constrained"
    UNCONSTRAINED = "unconstrained"

    @property
    def is_constrained(self) -> bool:
        return self is CapabilityTier.CONSTRAINED


class QualityLevel(str, Enum):
    """Export fidelity. Maps to an integer multiplier on the base block size."""
    MEDIUM = "medium"
    HIGH = "high"
    ULTRA = "ultra"

    def multiplier(self, tier: CapabilityTier) -> int:
        if self is QualityLevel.MEDIUM:
            return 1
        if self is QualityLevel.HIGH:
            return 2
        # ultra is deliberately capped on constrained hosts
        return 2 if tier.is_constrained else 3

    @classmethod
    def parse(cls, value: Union[str, "QualityLevel", None]) -> "QualityLevel":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.HIGH


def grid_shape(grid: ColorGrid) -> Tuple[int, int]:
    """Return (cols, rows) of a grid; (0, 0) when empty."""
    if not grid or not grid[0]:
        return 0, 0
    return len(grid[0]), len(grid)
