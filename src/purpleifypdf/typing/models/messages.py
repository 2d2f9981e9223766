"""Wire records exchanged with the host process and written into image containers."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from purpleifypdf.typing.enums import Quality
from purpleifypdf.typing.models.transformation import Color, PageRange


class PortOptions(BaseModel):
    """Body of an inbound `OPTS` frame."""

    model_config = ConfigDict(extra="forbid")

    quality: Quality
    background_color: Color
    in_file: str
    out_file: str
    page_range: PageRange | None = None

    @field_validator("quality", mode="before")
    @classmethod
    def _parse_quality(cls, value: object) -> object:
        if isinstance(value, str):
            return Quality.from_str(value)
        return value


class Status(BaseModel):
    """Body of an outbound `STAT` frame."""

    model_config = ConfigDict(extra="forbid")

    percent_done: float = Field(ge=0.0, le=1.0)


class DoneMessage(BaseModel):
    """Body of an outbound `DONE` frame."""

    model_config = ConfigDict(extra="forbid")

    original_title: str


class ErrorMessage(BaseModel):
    """Body of an outbound `ERRR` frame."""

    model_config = ConfigDict(extra="forbid")

    message: str


class ImagesMetadata(BaseModel):
    """Payload of the `MET` block opening an image container."""

    model_config = ConfigDict(extra="forbid", frozen=True, alias_generator=to_camel, populate_by_name=True)

    original_title: str
    page_count: int = Field(ge=0)
