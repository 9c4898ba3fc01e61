#!/usr/bin/env python3
# bubble_art/grid.py
"""
Grid builder: partitions a pixel buffer into blocks and samples each one.

The pass is cooperative. It yields to the host event loop after every
throttled progress report and every few scanlines, and polls a cancellation
check before each block and at each row boundary. A cancelled pass raises
ConversionCancelled and commits nothing.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Set, Tuple

from bubble_art.errors import ConversionCancelled
from bubble_art.model import CapabilityTier, Color, ColorGrid, PixelBuffer
from bubble_art.sampler import ColorSampler

__all__ = [
    "GridResult",
    "ConversionSession",
    "build_grid",
    "run_conversion",
    "grid_dimensions",
    "progress_step",
    "yield_to_loop",
    "ProgressCb",
    "CancelCheck",
    "YieldFn",
]

log = logging.getLogger(__name__)

ProgressCb = Callable[[float], None]
CancelCheck = Callable[[], bool]
YieldFn = Callable[[], Awaitable[None]]

# Target number of progress updates across one pass.
UPDATES_CONSTRAINED = 200
UPDATES_UNCONSTRAINED = 500

# Extra yield every k scanlines of blocks.
ROW_YIELD_CONSTRAINED = 3
ROW_YIELD_UNCONSTRAINED = 10


async def yield_to_loop() -> None:
    """Default suspension point: one tick of the asyncio loop."""
    await asyncio.sleep(0)


def grid_dimensions(width: int, height: int, block_size: int) -> Tuple[int, int]:
    """Return (cols, rows) for a buffer partitioned into block_size squares."""
    if block_size < 1:
        raise ValueError("block_size must be >= 1")
    return math.ceil(width / block_size), math.ceil(height / block_size)


def progress_step(total: int, updates: int) -> int:
    """Report once every N units so that roughly `updates` reports happen."""
    return max(1, total // max(1, updates))


def default_updates(tier: CapabilityTier) -> int:
    return UPDATES_CONSTRAINED if tier.is_constrained else UPDATES_UNCONSTRAINED


@dataclass
class GridResult:
    grid: ColorGrid
    distinct_colors: int
    total_blocks: int

    @property
    def cols(self) -> int:
        return len(self.grid[0]) if self.grid else 0

    @property
    def rows(self) -> int:
        return len(self.grid)


def _never_cancelled() -> bool:
    return False


async def build_grid(
    buffer: PixelBuffer,
    block_size: int,
    tier: CapabilityTier,
    on_progress: Optional[ProgressCb] = None,
    is_cancelled: Optional[CancelCheck] = None,
    *,
    sampler: Optional[ColorSampler] = None,
    progress_range: Tuple[float, float] = (0.0, 0.5),
    progress_updates: Optional[int] = None,
    yield_control: Optional[YieldFn] = None,
) -> GridResult:
    """
    Sample every block of `buffer` in row-major order and return the grid.

    Progress fractions are mapped into `progress_range`. Raises
    ConversionCancelled when `is_cancelled()` turns true at a checkpoint.
    """
    cols, rows = grid_dimensions(buffer.width, buffer.height, block_size)
    total = cols * rows
    sampler = sampler if sampler is not None else ColorSampler()
    is_cancelled = is_cancelled or _never_cancelled
    pause = yield_control or yield_to_loop
    start, end = progress_range
    span = end - start

    update_freq = progress_step(total, progress_updates or default_updates(tier))
    row_yield = block_size * (ROW_YIELD_CONSTRAINED if tier.is_constrained else ROW_YIELD_UNCONSTRAINED)
    log.info("Processing %d blocks (%dx%d) with size %dpx.", total, cols, rows, block_size)
    log.debug("Progress update frequency: every %d blocks", update_freq)

    grid: ColorGrid = []
    seen: Set[Color] = set()
    processed = 0

    for y in range(0, buffer.height, block_size):
        if is_cancelled():
            log.info("Conversion cancelled at row %d.", y // block_size)
            raise ConversionCancelled()

        row = []
        for x in range(0, buffer.width, block_size):
            if is_cancelled():
                log.info("Conversion cancelled at block %d,%d.", x, y)
                raise ConversionCancelled()

            color = sampler.sample_block(buffer, x, y, block_size, tier)
            row.append(color)
            seen.add(color)
            processed += 1

            if processed % update_freq == 0 or processed == total:
                if on_progress:
                    on_progress(start + span * processed / total)
                await pause()

        grid.append(row)

        if y % row_yield == 0:
            await pause()

    if total == 0 and on_progress:
        on_progress(end)

    log.info("Grid complete: %d blocks, %d distinct colors.", processed, len(seen))
    return GridResult(grid, len(seen), total)


@dataclass
class ConversionSession:
    """
    Transient per-caller state of a conversion: sampler cache, grid,
    cancellation flag and last reported progress.

    The session assumes at most one active pass; it does no locking.
    """
    sampler: ColorSampler = field(default_factory=ColorSampler)
    grid: ColorGrid = field(default_factory=list)
    block_size: int = 0
    progress: float = 0.0
    distinct_colors: int = 0
    _cancelled: bool = field(default=False, repr=False)

    def cancel(self) -> None:
        self._cancelled = True

    def is_cancelled(self) -> bool:
        return self._cancelled

    def clear_cancel(self) -> None:
        self._cancelled = False

    @property
    def has_grid(self) -> bool:
        return bool(self.grid) and bool(self.grid[0])

    def reset(self) -> None:
        """Drop grid and cache so the next pass starts clean."""
        self.sampler.clear()
        self.grid = []
        self.block_size = 0
        self.progress = 0.0
        self.distinct_colors = 0
        self._cancelled = False

    def report(self, on_progress: Optional[ProgressCb]) -> ProgressCb:
        """Wrap a progress callback so values are also kept on the session."""
        def _cb(value: float) -> None:
            self.progress = value
            if on_progress:
                on_progress(value)
        return _cb


async def run_conversion(
    session: ConversionSession,
    buffer: PixelBuffer,
    block_size: int,
    tier: CapabilityTier,
    on_progress: Optional[ProgressCb] = None,
    **kwargs,
) -> GridResult:
    """
    Fresh pass over `buffer` using the session's sampler and cancel flag.
    The grid is committed to the session only when the pass completes.
    """
    session.reset()
    result = await build_grid(
        buffer,
        block_size,
        tier,
        session.report(on_progress),
        session.is_cancelled,
        sampler=session.sampler,
        **kwargs,
    )
    session.grid = result.grid
    session.block_size = block_size
    session.distinct_colors = result.distinct_colors
    return result
