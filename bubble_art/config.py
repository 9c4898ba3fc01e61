#!/usr/bin/env python3
# bubble_art/config.py
"""
Config loader/saver and defaults for bubble-art.

Goals:
- Single JSON file per user.
- Safe atomic writes.
- Deep-merge of user config over defaults.
- Basic validation with sane fallbacks.
- No external deps.

Usage:
    from bubble_art.config import Config, DEFAULT_CONFIG
    cfg = Config.load()                 # ~/.config/bubble_art/bubble_art.json or OS-specific
    size = cfg["convert"]["block_size"]
    cfg["export"]["quality"] = "ultra"
    cfg.save()
"""

from __future__ import annotations

import copy
import json
import os
import platform
import shutil
import tempfile
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from bubble_art.model import CapabilityTier, QualityLevel

# ----------------------------
# Defaults
# ----------------------------

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")

DEFAULT_CONFIG: Dict[str, Any] = {
    "convert": {
        "block_size": 12,                 # source pixels per bubble
        "max_width": 600,                 # source is fitted into max_width x max_width
        "capability_tier": "unconstrained",   # constrained | unconstrained
    },
    "filters": {
        "enabled": True,                  # skipped on constrained tier regardless
        "contrast": 1.2,
        "brightness": 1.0,
        "saturation": 1.1,
    },
    "export": {
        "quality": "high",                # medium | high | ultra
        "output_dir": None,               # None: current directory
        "filename_prefix": "bubble-pixel-art",
    },
    "progress": {
        "updates_constrained": 200,       # target reports per pass
        "updates_unconstrained": 500,
    },
    "preview": {
        "terminal": True,
        "max_cols": 80,
        "glyph": "●",
    },
    "ui": {
        "theme": "auto",                  # auto | light | dark
    },
    "logging": {
        "level": "INFO",
        "file": None,                     # path or None
        "rotate_bytes": 5 * 1024 * 1024,
        "rotate_keep": 3,
        "modules": {},                    # logger name -> level, e.g. {"bubble_art.grid": "DEBUG"}
    },
}

# ----------------------------
# Helpers
# ----------------------------

def _os_config_home() -> str:
    """Return per-OS config base directory."""
    if platform.system() == "Windows":
        base = os.environ.get("APPDATA") or os.path.expanduser("~\\AppData\\Roaming")
        return os.path.join(base, "BubbleArt")
    # macOS: ~/Library/Application Support/BubbleArt
    if platform.system() == "Darwin":
        return os.path.join(os.path.expanduser("~/Library/Application Support"), "BubbleArt")
    # Linux and others: ~/.config/bubble_art
    return os.path.join(os.path.expanduser("~/.config"), "bubble_art")

def _default_config_path() -> str:
    """Resolve default config path, honoring BUBBLE_ART_CONFIG env override."""
    env = os.environ.get("BUBBLE_ART_CONFIG")
    if env:
        return os.path.expanduser(env)
    return os.path.join(_os_config_home(), "bubble_art.json")

def _deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    """Return deep-merged copy of dicts: values in b override a."""
    out = dict(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out

def _atomic_write_json(path: str, data: Dict[str, Any]) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".tmp_cfg_", dir=os.path.dirname(path) or ".")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp, path)
    except Exception:
        # Clean temp on error
        try:
            os.remove(tmp)
        except OSError:
            pass
        raise

def _coerce_num(v: Any, default: float, minmax: Optional[Tuple[float, float]] = None) -> float:
    try:
        x = float(v)
    except (TypeError, ValueError):
        return float(default)
    if minmax:
        lo, hi = minmax
        x = min(hi, max(lo, x))
    return x

def _coerce_int(v: Any, default: int, minmax: Optional[Tuple[int, int]] = None) -> int:
    try:
        x = int(v)
    except (TypeError, ValueError):
        return int(default)
    if minmax:
        lo, hi = minmax
        x = min(hi, max(lo, x))
    return x

def _coerce_bool(v: Any, default: bool) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        s = v.strip().lower()
        if s in ("1", "true", "yes", "on"): return True
        if s in ("0", "false", "no", "off"): return False
    return default

def _coerce_choice(v: Any, choices: Tuple[str, ...], default: str) -> str:
    s = str(v).strip().lower() if v is not None else ""
    return s if s in choices else default

# ----------------------------
# Validation
# ----------------------------

_TIERS = tuple(t.value for t in CapabilityTier)
_QUALITIES = tuple(q.value for q in QualityLevel)

def _validate(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Return validated copy with fallbacks applied."""
    c = copy.deepcopy(_deep_merge(DEFAULT_CONFIG, cfg or {}))
    d = DEFAULT_CONFIG

    # convert
    cv = c["convert"]
    cv["block_size"] = _coerce_int(cv.get("block_size"), d["convert"]["block_size"], (1, 256))
    cv["max_width"]  = _coerce_int(cv.get("max_width"), d["convert"]["max_width"], (16, 8192))
    cv["capability_tier"] = _coerce_choice(cv.get("capability_tier"), _TIERS, d["convert"]["capability_tier"])

    # filters
    fl = c["filters"]
    fl["enabled"] = _coerce_bool(fl.get("enabled"), d["filters"]["enabled"])
    for key in ("contrast", "brightness", "saturation"):
        fl[key] = _coerce_num(fl.get(key), d["filters"][key], (0.1, 3.0))

    # export
    ex = c["export"]
    ex["quality"] = _coerce_choice(ex.get("quality"), _QUALITIES, d["export"]["quality"])
    od = ex.get("output_dir")
    ex["output_dir"] = str(od) if od else None
    ex["filename_prefix"] = str(ex.get("filename_prefix") or d["export"]["filename_prefix"])

    # progress
    pr = c["progress"]
    pr["updates_constrained"]   = _coerce_int(pr.get("updates_constrained"), 200, (1, 100000))
    pr["updates_unconstrained"] = _coerce_int(pr.get("updates_unconstrained"), 500, (1, 100000))

    # preview
    pv = c["preview"]
    pv["terminal"] = _coerce_bool(pv.get("terminal"), d["preview"]["terminal"])
    pv["max_cols"] = _coerce_int(pv.get("max_cols"), d["preview"]["max_cols"], (4, 1000))
    pv["glyph"] = str(pv.get("glyph") or d["preview"]["glyph"])[:1]

    # ui
    ui = c["ui"]
    ui["theme"] = _coerce_choice(ui.get("theme"), ("auto", "light", "dark"), d["ui"]["theme"])

    # logging
    lg = c["logging"]
    level = str(lg.get("level") or "").upper()
    lg["level"] = level if level in LOG_LEVELS else d["logging"]["level"]
    mods = lg.get("modules")
    lg["modules"] = {
        str(name): str(lvl).upper()
        for name, lvl in (mods.items() if isinstance(mods, dict) else ())
        if str(lvl).upper() in LOG_LEVELS
    }
    lf = lg.get("file")
    lg["file"] = str(lf) if lf else None
    lg["rotate_bytes"] = _coerce_int(lg.get("rotate_bytes"), d["logging"]["rotate_bytes"], (256 * 1024, 50 * 1024 * 1024))
    lg["rotate_keep"]  = _coerce_int(lg.get("rotate_keep"), d["logging"]["rotate_keep"], (0, 50))

    return c

# ----------------------------
# Public API
# ----------------------------

@dataclass
class Config:
    """Thin wrapper around a nested dict with load/save/merge."""
    data: Dict[str, Any] = field(default_factory=lambda: _validate(json.loads(json.dumps(DEFAULT_CONFIG))))
    path: str = field(default_factory=_default_config_path)

    # --- Mapping-style access
    def __getitem__(self, k: str) -> Any:
        return self.data[k]

    def __setitem__(self, k: str, v: Any) -> None:
        self.data[k] = v

    def get(self, k: str, default: Any = None) -> Any:
        return self.data.get(k, default)

    # --- Ops
    @classmethod
    def load(cls, path: Optional[str] = None, create_if_missing: bool = True) -> "Config":
        cfg_path = os.path.expanduser(path) if path else _default_config_path()
        if not os.path.exists(cfg_path):
            cfg = _validate(DEFAULT_CONFIG)
            if create_if_missing:
                _atomic_write_json(cfg_path, cfg)
            return cls(cfg, cfg_path)

        try:
            with open(cfg_path, "r", encoding="utf-8") as f:
                user_cfg = json.load(f)
        except (OSError, ValueError):
            # Corrupt file. Backup and regenerate.
            backup = cfg_path + ".corrupt.bak"
            try:
                shutil.copyfile(cfg_path, backup)
            except OSError:
                pass
            user_cfg = {}

        if not isinstance(user_cfg, dict):
            user_cfg = {}
        return cls(_validate(_deep_merge(DEFAULT_CONFIG, user_cfg)), cfg_path)

    def save(self) -> None:
        """Persist to JSON atomically."""
        # Write validated data (defaults + diff) so file is complete and readable
        full = _validate(_deep_merge(DEFAULT_CONFIG, _diff(DEFAULT_CONFIG, self.data)))
        _atomic_write_json(self.path, full)
        self.data = full  # sync in-memory with normalized values

    def update(self, partial: Dict[str, Any]) -> None:
        """Deep-merge a partial config then validate."""
        merged = _deep_merge(self.data, partial)
        self.data = _validate(merged)

    # Convenience getters
    @property
    def block_size(self) -> int:
        return int(self.data["convert"]["block_size"])

    @property
    def capability_tier(self) -> CapabilityTier:
        return CapabilityTier(self.data["convert"]["capability_tier"])

    @property
    def quality(self) -> QualityLevel:
        return QualityLevel.parse(self.data["export"]["quality"])

    def progress_updates(self, tier: CapabilityTier) -> int:
        p = self.data["progress"]
        return int(p["updates_constrained"] if tier.is_constrained else p["updates_unconstrained"])


def _diff(base: Dict[str, Any], cur: Dict[str, Any]) -> Dict[str, Any]:
    """Return nested dictionary of keys where cur differs from base."""
    out: Dict[str, Any] = {}
    for k in cur.keys() | base.keys():
        if k not in base:
            out[k] = cur[k]
            continue
        if k not in cur:
            continue
        vb = base[k]
        vc = cur[k]
        if isinstance(vb, dict) and isinstance(vc, dict):
            d = _diff(vb, vc)
            if d:
                out[k] = d
        elif vb != vc:
            out[k] = vc
    return out

__all__ = [
    "Config",
    "DEFAULT_CONFIG",
    "_default_config_path",
]
