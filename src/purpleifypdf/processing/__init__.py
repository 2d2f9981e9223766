"""Pixel processing helpers."""

from purpleifypdf.processing.background import (
    BACKGROUND_THRESHOLD,
    is_background,
    normalize_background,
)

__all__ = [
    "BACKGROUND_THRESHOLD",
    "is_background",
    "normalize_background",
]
