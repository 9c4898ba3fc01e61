#!/usr/bin/env python3
# bubble_art/styles.py
"""
Style definitions for bubble-art terminal output.
Provides light, dark, and auto themes for prompt_toolkit.
"""

import os

from prompt_toolkit.styles import Style
from bubble_art.config import Config

def make_style(cfg: Config) -> Style:
    theme = cfg["ui"].get("theme", "auto")

    base_dark = {
        "status": "bg:#303030 #cccccc",
        "stat-key": "#888888",
        "stat-value": "#ffffff bold",
        "error": "#ff4757 bold",
    }
    base_light = {
        "status": "bg:#cccccc #000000",
        "stat-key": "#555555",
        "stat-value": "#000000 bold",
        "error": "#c0392b bold",
    }

    if theme == "light":
        return Style.from_dict(base_light)
    if theme == "dark":
        return Style.from_dict(base_dark)

    # Auto-detect via environment
    if os.getenv("TERM_THEME", "").lower() == "light":
        return Style.from_dict(base_light)

    return Style.from_dict(base_dark)
