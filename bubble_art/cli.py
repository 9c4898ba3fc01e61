#!/usr/bin/env python3
# bubble_art/cli.py
"""
Entry point for bubble-art.
Loads configuration, converts one image and writes the bubble PNG.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import FormattedText

from bubble_art.config import Config
from bubble_art.converter import BubbleConverter
from bubble_art.errors import BubbleArtError, ConversionCancelled
from bubble_art.loader import FilterSettings, load_image
from bubble_art.logging_conf import setup_logging
from bubble_art.model import CapabilityTier, QualityLevel
from bubble_art.rendering.preview import render_preview
from bubble_art.rendering.terminal import frame_to_formatted_text, grid_to_fragments
from bubble_art.styles import make_style
from bubble_art.version import version_info

log = logging.getLogger("bubble_art")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="bubble-art",
        description="Convert an image into shaded bubble pixel art.",
    )
    p.add_argument("input", help="source image (PNG, JPEG, GIF, WebP)")
    p.add_argument("-o", "--output-dir", help="directory for the exported PNG")
    p.add_argument("--block-size", type=int, help="source pixels per bubble")
    p.add_argument("--max-width", type=int, help="fit the source into this square before sampling")
    p.add_argument("--quality", choices=[q.value for q in QualityLevel])
    p.add_argument("--tier", choices=[t.value for t in CapabilityTier])
    p.add_argument("--no-filters", action="store_true", help="skip contrast/brightness/saturation")
    p.add_argument("--no-preview", action="store_true", help="do not print the terminal preview")
    p.add_argument("--preview-png", help="also write the low-resolution preview to this path")
    p.add_argument("--config", help="config file path")
    p.add_argument("--version", action="version", version=version_info())
    return p


def _overrides(args: argparse.Namespace) -> dict:
    out: dict = {"convert": {}, "export": {}, "filters": {}, "preview": {}}
    if args.block_size is not None:
        out["convert"]["block_size"] = args.block_size
    if args.max_width is not None:
        out["convert"]["max_width"] = args.max_width
    if args.tier:
        out["convert"]["capability_tier"] = args.tier
    if args.quality:
        out["export"]["quality"] = args.quality
    if args.output_dir:
        out["export"]["output_dir"] = args.output_dir
    if args.no_filters:
        out["filters"]["enabled"] = False
    if args.no_preview:
        out["preview"]["terminal"] = False
    return out


class _ProgressLogger:
    """Log combined progress in 10% steps."""

    def __init__(self) -> None:
        self._last = -1

    def __call__(self, value: float) -> None:
        step = int(value * 10)
        if step > self._last:
            self._last = step
            log.info("Processing... %d%%", round(value * 100))


def _print_summary(converter: BubbleConverter, path, style) -> None:
    s = converter.stats
    rows = [
        ("Bubbles", f"{s.total_bubbles:,}"),
        ("Colors", f"{s.color_count:,}"),
        ("Original", s.original_size),
        ("Processed", s.processed_size),
        ("Saved", str(path)),
    ]
    out = []
    for key, value in rows:
        out.append(("class:stat-key", f"{key:>10}: "))
        out.append(("class:stat-value", value))
        out.append(("", "\n"))
    print_formatted_text(FormattedText(out), style=style)


def run(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = Config.load(args.config)
    cfg.update(_overrides(args))
    setup_logging(cfg)
    style = make_style(cfg)

    f = cfg["filters"]
    filters = FilterSettings(f["contrast"], f["brightness"], f["saturation"]) if f["enabled"] else None
    converter = BubbleConverter(cfg)

    try:
        loaded = load_image(args.input, cfg["convert"]["max_width"], filters, cfg.capability_tier)
        converter.stats.original_size = loaded.describe_original()
        image = asyncio.run(converter.generate_and_export(loaded.buffer, on_progress=_ProgressLogger()))
        path = converter.save(image)
        if args.preview_png:
            render_preview(converter.session.grid, converter.session.block_size).save(args.preview_png, "PNG")
    except KeyboardInterrupt:
        converter.cancel()
        log.info("Interrupted.")
        return 130
    except ConversionCancelled:
        return 130
    except BubbleArtError as exc:
        print_formatted_text(FormattedText([("class:error", f"Error: {exc}")]), style=style)
        return 1

    if cfg["preview"]["terminal"]:
        frame = grid_to_fragments(
            converter.session.grid,
            max_cols=cfg["preview"]["max_cols"],
            glyph=cfg["preview"]["glyph"],
        )
        print_formatted_text(frame_to_formatted_text(frame))
    _print_summary(converter, path, style)
    return 0


def main():
    raise SystemExit(run(sys.argv[1:]))

if __name__ == "__main__":
    main()
