#!/usr/bin/env python3
# bubble_art/loader.py
"""
Source image loading for the conversion engine.

Decodes a file with Pillow, fits it into a max_width square, applies the
contrast / brightness / saturation filters and hands back a PixelBuffer.
The engine itself never touches files; this module is its supplier.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image, ImageEnhance, UnidentifiedImageError

from bubble_art.errors import ImageLoadError
from bubble_art.model import CHANNELS, CapabilityTier, PixelBuffer

__all__ = [
    "FilterSettings",
    "LoadedImage",
    "load_image",
    "fit_dimensions",
    "apply_filters",
    "has_visible_pixels",
    "format_file_size",
]

log = logging.getLogger(__name__)

# Sample every Nth pixel when checking that a decode produced something.
_VISIBILITY_STRIDE = 100


@dataclass(frozen=True)
class FilterSettings:
    contrast: float = 1.2
    brightness: float = 1.0
    saturation: float = 1.1

    @property
    def is_identity(self) -> bool:
        return self.contrast == 1.0 and self.brightness == 1.0 and self.saturation == 1.0


@dataclass
class LoadedImage:
    buffer: PixelBuffer
    original_size: Tuple[int, int]
    processed_size: Tuple[int, int]
    file_bytes: int

    def describe_original(self) -> str:
        w, h = self.original_size
        return f"{w}x{h} ({format_file_size(w * h * CHANNELS)})"

    def describe_processed(self) -> str:
        w, h = self.processed_size
        return f"{w}x{h}"


def _round_half_up(v: float) -> int:
    return int(math.floor(v + 0.5))


def fit_dimensions(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
    """Scale (width, height) to fit the box, preserving aspect ratio. Upscales too."""
    if width <= 0 or height <= 0:
        raise ValueError("image dimensions must be positive")
    ratio = min(max_width / width, max_height / height)
    return max(1, _round_half_up(width * ratio)), max(1, _round_half_up(height * ratio))


def apply_filters(img: Image.Image, settings: FilterSettings) -> Image.Image:
    """Contrast, brightness and saturation adjustments, in that order."""
    if settings.is_identity:
        return img
    if settings.contrast != 1.0:
        img = ImageEnhance.Contrast(img).enhance(settings.contrast)
    if settings.brightness != 1.0:
        img = ImageEnhance.Brightness(img).enhance(settings.brightness)
    if settings.saturation != 1.0:
        img = ImageEnhance.Color(img).enhance(settings.saturation)
    return img


def has_visible_pixels(buffer: PixelBuffer) -> bool:
    """True when a strided sample of the buffer contains any non-black pixel."""
    data = buffer.data
    step = CHANNELS * _VISIBILITY_STRIDE
    for i in range(0, len(data) - 2, step):
        if data[i] or data[i + 1] or data[i + 2]:
            return True
    return False


def format_file_size(num_bytes: int) -> str:
    sizes = ("Bytes", "KB", "MB", "GB")
    if num_bytes <= 0:
        return "0 Bytes"
    i = min(len(sizes) - 1, int(math.floor(math.log(num_bytes) / math.log(1024))))
    value = round(num_bytes / (1024 ** i), 2)
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {sizes[i]}"


def load_image(
    path: str,
    max_width: int = 600,
    filters: Optional[FilterSettings] = None,
    tier: CapabilityTier = CapabilityTier.UNCONSTRAINED,
) -> LoadedImage:
    """
    Decode `path` into a PixelBuffer fitted to max_width x max_width.

    Filters are skipped on the constrained tier. Raises ImageLoadError when the
    file cannot be decoded or decodes to an all-black image.
    """
    try:
        file_bytes = os.path.getsize(path)
        with Image.open(path) as src:
            src.load()
            img = src.convert("RGB")
    except (OSError, UnidentifiedImageError) as exc:
        raise ImageLoadError(f"Failed to read image {path!r}: {exc}") from exc

    log.info("Loaded %s: %dx%d, %s", path, img.width, img.height, format_file_size(file_bytes))
    original_size = (img.width, img.height)
    target = fit_dimensions(img.width, img.height, max_width, max_width)
    if target != original_size:
        img = img.resize(target, Image.LANCZOS)

    if filters is not None and not tier.is_constrained:
        img = apply_filters(img, filters)

    buffer = PixelBuffer.from_image(img)
    if not has_visible_pixels(buffer):
        raise ImageLoadError("Could not read image pixels. Try a different image.")

    return LoadedImage(buffer, original_size, target, file_bytes)
