"""Conversions between points, pixels and millimetres.

The constants below size every rendered page and every reassembled page. They
are relied upon by consumers of the output documents and must not change.
"""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field

from purpleifypdf.typing.enums import Quality

INCHES_PER_POINT = 0.996264 / 72.0
MILLIMETERS_PER_POINT = 0.352778
MILLIMETERS_PER_INCH = 25.4
POINTS_PER_INCH = 72.0


def ppi_for_quality(quality: Quality) -> float:
    """Return the pixel density rendered at `quality`."""
    return quality.ppi


def points_to_pixels(points: float, ppi: float) -> float:
    """Convert a length in points to (fractional) pixels at `ppi`."""
    inches = points * INCHES_PER_POINT
    return inches * ppi


def pixels_ceil(pixels: float) -> int:
    """Round a pixel length up to a whole pixel."""
    return math.ceil(pixels)


def points_to_millimeters(points: float) -> float:
    """Convert a length in points to millimetres."""
    return points * MILLIMETERS_PER_POINT


def millimeters_to_points(millimeters: float) -> float:
    """Convert a length in millimetres to PDF user-space points."""
    return millimeters * POINTS_PER_INCH / MILLIMETERS_PER_INCH


class PageSize(BaseModel):
    """Natural size of a page and the density it is rendered at."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    width: float = Field(ge=0.0, description="Width in points.")
    height: float = Field(ge=0.0, description="Height in points.")
    ppi: float = Field(gt=0.0)

    @classmethod
    def for_quality(cls, width: float, height: float, quality: Quality) -> PageSize:
        """Build the size of a page rendered at `quality`."""
        return cls(width=width, height=height, ppi=ppi_for_quality(quality))

    @property
    def width_px(self) -> int:
        return pixels_ceil(points_to_pixels(self.width, self.ppi))

    @property
    def height_px(self) -> int:
        return pixels_ceil(points_to_pixels(self.height, self.ppi))

    @property
    def width_mm(self) -> float:
        return points_to_millimeters(self.width)

    @property
    def height_mm(self) -> float:
        return points_to_millimeters(self.height)

    @property
    def scale_factor(self) -> float:
        """Pixels per point."""
        return points_to_pixels(1.0, self.ppi)

    def describe(self) -> str:
        """Short human readable form used in log lines."""
        return f"{self.width_px}x{self.height_px}px@{self.ppi:g}ppi"
