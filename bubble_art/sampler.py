#!/usr/bin/env python3
# bubble_art/sampler.py
"""
Block color sampler with a per-pass memo cache.

A block's representative color is the rounded mean of a few fixed sample
points inside it. Coordinates are clamped into the buffer; samples whose byte
index falls outside the data are skipped. A block without any readable sample
is black.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Tuple

from bubble_art.model import BLACK, CHANNELS, CapabilityTier, Color, PixelBuffer, SampleCacheKey

__all__ = [
    "ColorSampler",
    "sample_block",
    "sample_offsets",
    "FULL_OFFSETS",
    "REDUCED_OFFSETS",
]

log = logging.getLogger(__name__)

Offset = Tuple[float, float]

# Center plus the four quadrant centers.
FULL_OFFSETS: Tuple[Offset, ...] = (
    (0.5, 0.5),
    (0.25, 0.25), (0.75, 0.25),
    (0.25, 0.75), (0.75, 0.75),
)
# Center only, for constrained hosts.
REDUCED_OFFSETS: Tuple[Offset, ...] = ((0.5, 0.5),)


def sample_offsets(tier: CapabilityTier) -> Tuple[Offset, ...]:
    return REDUCED_OFFSETS if tier.is_constrained else FULL_OFFSETS


def _clamp(v: int, lo: int, hi: int) -> int:
    # hi wins over lo so a 0-wide buffer yields -1 and fails the index check
    return min(hi, max(lo, v))


def _round_half_up(v: float) -> int:
    return int(math.floor(v + 0.5))


def sample_block(
    buffer: PixelBuffer,
    origin_x: int,
    origin_y: int,
    block_size: int,
    tier: CapabilityTier,
) -> Color:
    """Uncached representative color of one block."""
    data = buffer.data
    width, height = buffer.width, buffer.height
    r = g = b = count = 0

    for dx, dy in sample_offsets(tier):
        x = _clamp(origin_x + int(math.floor(block_size * dx)), 0, width - 1)
        y = _clamp(origin_y + int(math.floor(block_size * dy)), 0, height - 1)
        index = (y * width + x) * CHANNELS
        if index >= 0 and index + 2 < len(data):
            r += data[index]
            g += data[index + 1]
            b += data[index + 2]
            count += 1

    if count == 0:
        log.warning("No valid sample points for block at %d,%d. Using black.", origin_x, origin_y)
        return BLACK

    return Color(_round_half_up(r / count), _round_half_up(g / count), _round_half_up(b / count))


class ColorSampler:
    """
    Memoizing wrapper around sample_block.

    The cache is keyed on block geometry only, so it must be cleared whenever
    the source buffer or the block size changes. Not thread-safe; a sampler
    belongs to one conversion session.
    """

    def __init__(self) -> None:
        self._cache: Dict[SampleCacheKey, Color] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: SampleCacheKey) -> bool:
        return key in self._cache

    def clear(self) -> None:
        self._cache.clear()
        self.hits = 0
        self.misses = 0

    def sample_block(
        self,
        buffer: PixelBuffer,
        origin_x: int,
        origin_y: int,
        block_size: int,
        tier: CapabilityTier,
    ) -> Color:
        key = (origin_x, origin_y, block_size)
        cached = self._cache.get(key)
        if cached is not None:
            self.hits += 1
            return cached

        self.misses += 1
        color = sample_block(buffer, origin_x, origin_y, block_size, tier)
        # identity check: only the fallback constant is skipped, real black is cached
        if color is not BLACK:
            self._cache[key] = color
        return color
