"""Core domain model exports."""

from purpleifypdf.typing.models.messages import (
    DoneMessage,
    ErrorMessage,
    ImagesMetadata,
    PortOptions,
    Status,
)
from purpleifypdf.typing.models.transformation import (
    DEFAULT_BACKGROUND_COLOR,
    Color,
    PageRange,
    TransformationOptions,
)

__all__ = [
    "DEFAULT_BACKGROUND_COLOR",
    "Color",
    "DoneMessage",
    "ErrorMessage",
    "ImagesMetadata",
    "PageRange",
    "PortOptions",
    "Status",
    "TransformationOptions",
]
