#!/usr/bin/env python3
# bubble_art/errors.py
"""
Exception types raised by the conversion engine and its collaborators.

Out-of-range sample coordinates are not errors: they are clamped, and a block
with no readable samples falls back to black.
"""

__all__ = [
    "BubbleArtError",
    "EmptyGridError",
    "ConversionCancelled",
    "ConversionInProgress",
    "ImageLoadError",
]


class BubbleArtError(Exception):
    """Base class for bubble-art errors."""


class EmptyGridError(BubbleArtError):
    """Export requested while no usable color grid exists."""


class ConversionCancelled(BubbleArtError):
    """A pass stopped at a cancellation checkpoint. Carries no partial result."""


class ConversionInProgress(BubbleArtError):
    """A new pass was requested while the session is still busy."""


class ImageLoadError(BubbleArtError):
    """The source image could not be decoded into usable pixels."""
