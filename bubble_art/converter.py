#!/usr/bin/env python3
# bubble_art/converter.py
"""
Conversion facade: one session, its stats, and the preview/export passes.

BubbleConverter is what a host (the CLI, or any event-loop driven UI) talks
to. It serializes passes on its session, maps progress of the combined
"generate and export" operation onto a single 0..1 scale, and writes the
final PNG.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image

from bubble_art.config import Config
from bubble_art.errors import ConversionCancelled, ConversionInProgress, EmptyGridError
from bubble_art.export import render_export
from bubble_art.grid import ConversionSession, GridResult, ProgressCb, run_conversion
from bubble_art.model import CapabilityTier, PixelBuffer, QualityLevel

__all__ = ["BubbleConverter", "ConversionStats"]

log = logging.getLogger(__name__)

PREVIEW_RANGE = (0.0, 0.5)
EXPORT_RANGE = (0.5, 1.0)


@dataclass
class ConversionStats:
    total_bubbles: int = 0
    color_count: int = 0
    original_size: str = ""
    processed_size: str = ""


class BubbleConverter:
    """Drives conversion passes for one caller-owned session."""

    def __init__(self, cfg: Config, session: Optional[ConversionSession] = None):
        self.cfg = cfg
        self.session = session or ConversionSession()
        self.stats = ConversionStats()
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def tier(self) -> CapabilityTier:
        return self.cfg.capability_tier

    @property
    def block_size(self) -> int:
        return self.cfg.block_size

    def _acquire(self) -> None:
        if self._running:
            log.warning("Pass requested while a conversion is already in progress.")
            raise ConversionInProgress("Conversion already in progress. Please wait.")
        self._running = True

    # -------------
    # Passes
    # -------------

    async def convert(
        self,
        buffer: PixelBuffer,
        on_progress: Optional[ProgressCb] = None,
        progress_range: Tuple[float, float] = PREVIEW_RANGE,
    ) -> GridResult:
        """Build a fresh color grid. On cancellation the session grid stays empty."""
        self._acquire()
        try:
            log.info("Starting bubble conversion...")
            result = await run_conversion(
                self.session,
                buffer,
                self.block_size,
                self.tier,
                on_progress,
                progress_range=progress_range,
                progress_updates=self.cfg.progress_updates(self.tier),
            )
        except ConversionCancelled:
            log.info("Bubble conversion was cancelled.")
            self.session.grid = []
            self.stats = ConversionStats()
            raise
        finally:
            self._running = False

        self.stats.total_bubbles = result.total_blocks
        self.stats.color_count = result.distinct_colors
        self.stats.processed_size = f"{buffer.width}x{buffer.height}"
        log.info("Bubble conversion completed.")
        return result

    async def export(
        self,
        quality: Union[QualityLevel, str, None] = None,
        on_progress: Optional[ProgressCb] = None,
        progress_range: Tuple[float, float] = EXPORT_RANGE,
        clear_cancel: bool = True,
    ) -> Image.Image:
        """Render the session grid at export resolution."""
        self._acquire()
        try:
            if not self.session.has_grid:
                raise EmptyGridError("No bubble art generated to export.")
            quality = QualityLevel.parse(quality if quality is not None else self.cfg.quality)
            if clear_cancel:
                self.session.clear_cancel()
            return await render_export(
                self.session.grid,
                quality,
                self.tier,
                self.session.report(on_progress),
                self.session.is_cancelled,
                base_block_size=self.session.block_size,
                progress_range=progress_range,
                progress_updates=self.cfg.progress_updates(self.tier),
            )
        finally:
            self._running = False

    async def generate_and_export(
        self,
        buffer: PixelBuffer,
        quality: Union[QualityLevel, str, None] = None,
        on_progress: Optional[ProgressCb] = None,
    ) -> Image.Image:
        """Grid build on [0, 0.5] then export render on [0.5, 1.0]."""
        await self.convert(buffer, on_progress, PREVIEW_RANGE)
        return await self.export(quality, on_progress, EXPORT_RANGE, clear_cancel=False)

    # -------------
    # Control
    # -------------

    def cancel(self) -> None:
        self.session.cancel()

    def reset(self) -> None:
        self.session.reset()
        self.stats = ConversionStats()

    def save(self, image: Image.Image, output_dir: Union[str, Path, None] = None) -> Path:
        """Write `image` as a timestamped PNG and return its path."""
        out_dir = Path(output_dir or self.cfg["export"].get("output_dir") or ".").expanduser()
        out_dir.mkdir(parents=True, exist_ok=True)
        prefix = self.cfg["export"].get("filename_prefix") or "bubble-pixel-art"
        path = out_dir / f"{prefix}-{int(time.time() * 1000)}.png"
        image.save(path, "PNG")
        log.info("Saved %s (%dx%d).", path, image.width, image.height)
        return path
