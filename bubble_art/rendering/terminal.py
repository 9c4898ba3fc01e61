#!/usr/bin/env python3
# bubble_art/rendering/terminal.py
"""
Terminal preview of a color grid.

- Output format: list[list[tuple[str, str]]] suitable for prompt_toolkit
  FormattedText, one list of (style, text) runs per terminal row.
- Style strings use "fg:#RRGGBB" tokens; adjacent cells with the same color
  are merged into a single run.
- Grids wider than the terminal are strided down so each row fits.
"""

from __future__ import annotations

import math
from typing import List, Optional, Tuple

from prompt_toolkit.formatted_text import FormattedText

from bubble_art.model import Color, ColorGrid

StyleRun = Tuple[str, str]                # (style, text)
LineFrag = List[StyleRun]                 # one terminal row as runs
FrameFrag = List[LineFrag]                # full terminal frame as rows

__all__ = [
    "grid_to_fragments",
    "frame_to_formatted_text",
    "StyleRun",
    "LineFrag",
    "FrameFrag",
    "DEFAULT_GLYPH",
]

DEFAULT_GLYPH = "●"


def _rgb_to_style(color: Color) -> str:
    # prompt_toolkit accepts "fg:#RRGGBB"
    return f"fg:{color.to_hex()}"


def grid_to_fragments(
    grid: ColorGrid,
    max_cols: Optional[int] = None,
    glyph: str = DEFAULT_GLYPH,
) -> FrameFrag:
    """Return one run-length merged line of colored glyphs per sampled grid row."""
    if not grid or not grid[0]:
        return [[("", "")]]

    cols = len(grid[0])
    step = 1
    if max_cols and max_cols > 0 and cols > max_cols:
        step = math.ceil(cols / max_cols)
    glyph = glyph or DEFAULT_GLYPH

    frame: FrameFrag = []
    for row in grid[::step]:
        line: LineFrag = []
        run_style = None
        run_text: List[str] = []
        for color in row[::step]:
            style = _rgb_to_style(color)
            if style != run_style and run_text:
                line.append((run_style, "".join(run_text)))
                run_text = []
            run_style = style
            run_text.append(glyph)
        if run_text:
            line.append((run_style, "".join(run_text)))
        frame.append(line if line else [("", "")])
    return frame


def frame_to_formatted_text(frame: FrameFrag) -> FormattedText:
    """Flatten frame rows into a single FormattedText with newlines."""
    out: List[StyleRun] = []
    for line in frame:
        out.extend(line)
        out.append(("", "\n"))
    return FormattedText(out)
