#!/usr/bin/env python3
# bubble_art/logging_conf.py
"""
Logging for bubble-art.

The root handler prints to the console (plus an optional rotating file);
levels are applied to the `bubble_art` package logger, with per-module
overrides from cfg["logging"]["modules"], so a single noisy stage such as
the grid builder can be turned up to DEBUG on its own.
"""

import logging
from logging.handlers import RotatingFileHandler
from typing import Dict

from bubble_art.config import Config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
PACKAGE_LOGGER = "bubble_art"


def _level(name: str, default: int = logging.INFO) -> int:
    return getattr(logging, str(name).upper(), default)


def apply_module_levels(modules: Dict[str, str]) -> None:
    """Set explicit levels on individual loggers (`bubble_art.grid`, `PIL`, ...)."""
    for name, level_name in modules.items():
        logging.getLogger(name).setLevel(_level(level_name))


def setup_logging(cfg: Config) -> None:
    lg = cfg["logging"]
    level = _level(lg.get("level", "INFO"))
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)

    log_file = lg.get("file")
    if log_file:
        handler = RotatingFileHandler(
            log_file,
            maxBytes=int(lg.get("rotate_bytes", 5 * 1024 * 1024)),
            backupCount=int(lg.get("rotate_keep", 3)),
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(handler)

    # Pillow's plugin discovery is chatty at DEBUG
    logging.getLogger("PIL").setLevel(max(level, logging.INFO))
    apply_module_levels(lg.get("modules") or {})
