"""Transformation option models."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from purpleifypdf.typing.enums import Quality

_HEX_COLOR = re.compile(r"^#?(?P<r>[0-9a-f]{2})(?P<g>[0-9a-f]{2})(?P<b>[0-9a-f]{2})$")


class Color(BaseModel):
    """8-bit RGB colour, without alpha."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    r: int = Field(ge=0, le=255)
    g: int = Field(ge=0, le=255)
    b: int = Field(ge=0, le=255)

    @classmethod
    def from_hex(cls, value: str) -> Color:
        """Parse a `#rrggbb` colour (the `#` is optional, case is ignored).

        Raises:
            ValueError: If the value is not a six digit hex colour.
        """
        match = _HEX_COLOR.match(value.strip().lower())
        if match is None:
            raise ValueError(f"Failed to parse hex color: '{value}'")
        return cls(r=int(match["r"], 16), g=int(match["g"], 16), b=int(match["b"], 16))

    def to_hex(self) -> str:
        """Return the colour as `#rrggbb`."""
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"

    def to_bgr(self) -> tuple[int, int, int]:
        """Return channels in the (blue, green, red) order of rendered pixel buffers."""
        return (self.b, self.g, self.r)


DEFAULT_BACKGROUND_COLOR = Color(r=226, g=97, b=255)  # #e261ff, a purple


class PageRange(BaseModel):
    """Contiguous selection of pages.

    `starting_index` is zero based. A start past the last page selects nothing,
    and a count larger than the pages available is clipped to what exists.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    starting_index: int = Field(default=0, ge=0)
    count: int = Field(ge=0)

    @classmethod
    def all_pages(cls, page_count: int) -> PageRange:
        """Return the range selecting every page of a document."""
        return cls(starting_index=0, count=page_count)

    def includes(self, offset: int, pages_in_doc: int) -> bool:
        """Return whether `offset` (relative to `starting_index`) is selected."""
        if offset < 0 or offset >= self.count:
            return False
        return self.starting_index + offset < pages_in_doc


class TransformationOptions(BaseModel):
    """How a document is transformed. Fixed once a transformation starts."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    quality: Quality
    background_color: Color = DEFAULT_BACKGROUND_COLOR
    page_range: PageRange

    @field_validator("quality", mode="before")
    @classmethod
    def _parse_quality(cls, value: object) -> object:
        if isinstance(value, str):
            return Quality.from_str(value)
        return value
