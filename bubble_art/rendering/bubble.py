#!/usr/bin/env python3
# bubble_art/rendering/bubble.py
"""
Shaded-sphere ("bubble") renderer.

Each bubble is three composited draws over the same disc:
  1. flat base color fill, so nothing behind bleeds through at the rim
  2. radial gradient light -> base -> dark, focused up and to the left
  3. small translucent white highlight around the focal point

Surfaces are uint8 numpy arrays of shape (H, W, 3). Pixels are evaluated at
their centers with a one pixel anti-aliased rim, so the same code works for
a 6 px preview bubble and a 72 px export bubble.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from bubble_art.model import Color

__all__ = [
    "BubbleStyle",
    "PREVIEW_STYLE",
    "EXPORT_STYLE",
    "render_bubble",
    "lighten",
    "darken",
]


@dataclass(frozen=True)
class BubbleStyle:
    light_amount: int            # added to each channel at the focal point
    dark_amount: int             # subtracted at the rim
    base_stop: float             # gradient position of the flat base color
    gradient_offset: float       # focal offset, fraction of radius, both axes
    highlight_scale: float = 0.4
    highlight_stops: Tuple[Tuple[float, float], ...] = ((0.0, 0.8), (1.0, 0.0))
    radius_pad: float = 0.0      # added to half the cell size by grid renderers


PREVIEW_STYLE = BubbleStyle(
    light_amount=50,
    dark_amount=35,
    base_stop=0.5,
    gradient_offset=0.3,
)

EXPORT_STYLE = BubbleStyle(
    light_amount=70,
    dark_amount=45,
    base_stop=0.6,
    gradient_offset=0.35,
    highlight_stops=((0.0, 0.8), (0.5, 0.3), (1.0, 0.0)),
    radius_pad=0.5,
)

_WHITE = np.array([255.0, 255.0, 255.0])


def lighten(color: Color, amount: int) -> Color:
    return Color(*(min(255, c + amount) for c in color))


def darken(color: Color, amount: int) -> Color:
    return Color(*(max(0, c - amount) for c in color))


def _coverage(px: np.ndarray, py: np.ndarray, cx: float, cy: float, radius: float) -> np.ndarray:
    """Approximate fraction of each pixel inside the circle."""
    dist = np.hypot(px - cx, py - cy)
    return np.clip(radius - dist + 0.5, 0.0, 1.0)


def _gradient_t(
    px: np.ndarray, py: np.ndarray, fx: float, fy: float, cx: float, cy: float, radius: float
) -> np.ndarray:
    """
    Gradient parameter of a focal radial gradient (start circle of radius 0
    at f, end circle (c, radius)). For each pixel p, solve for the s where
    f + s*(p - f) lands on the end circle; t = 1/s.
    """
    dx = px - fx
    dy = py - fy
    ex = fx - cx
    ey = fy - cy
    a = dx * dx + dy * dy
    b = 2.0 * (ex * dx + ey * dy)
    c = ex * ex + ey * ey - radius * radius   # negative: focal is inside
    root = np.sqrt(np.maximum(b * b - 4.0 * a * c, 0.0))
    denom = root - b
    t = np.divide(2.0 * a, denom, out=np.zeros_like(a), where=denom > 0)
    return np.clip(t, 0.0, 1.0)


def _over(region: np.ndarray, color: np.ndarray, alpha: np.ndarray) -> np.ndarray:
    a = alpha[..., None]
    return region * (1.0 - a) + color * a


def render_bubble(
    surface: np.ndarray,
    center_x: float,
    center_y: float,
    radius: float,
    color: Color,
    style: BubbleStyle = EXPORT_STYLE,
) -> None:
    """Draw one shaded bubble onto `surface` in place."""
    if radius <= 0:
        return
    height, width = surface.shape[:2]
    x0 = max(0, int(np.floor(center_x - radius - 1)))
    y0 = max(0, int(np.floor(center_y - radius - 1)))
    x1 = min(width, int(np.ceil(center_x + radius + 1)))
    y1 = min(height, int(np.ceil(center_y + radius + 1)))
    if x0 >= x1 or y0 >= y1:
        return

    py, px = np.mgrid[y0:y1, x0:x1].astype(np.float64)
    px += 0.5
    py += 0.5

    base = np.array(color, dtype=np.float64)
    region = surface[y0:y1, x0:x1].astype(np.float64)
    disc = _coverage(px, py, center_x, center_y, radius)

    region = _over(region, base, disc)

    fx = center_x - radius * style.gradient_offset
    fy = center_y - radius * style.gradient_offset
    t = _gradient_t(px, py, fx, fy, center_x, center_y, radius)
    stops = (0.0, style.base_stop, 1.0)
    light = lighten(color, style.light_amount)
    dark = darken(color, style.dark_amount)
    shade = np.stack(
        [np.interp(t, stops, (light[i], color[i], dark[i])) for i in range(3)],
        axis=-1,
    )
    region = _over(region, shade, disc)

    hr = radius * style.highlight_scale
    if hr > 0:
        positions = [p for p, _ in style.highlight_stops]
        alphas = [a for _, a in style.highlight_stops]
        dist = np.hypot(px - fx, py - fy) / hr
        glare = np.interp(dist, positions, alphas, right=0.0) * _coverage(px, py, fx, fy, hr)
        region = _over(region, _WHITE, glare)

    surface[y0:y1, x0:x1] = np.clip(np.rint(region), 0, 255).astype(np.uint8)
