"""Typing-centric domain modules."""

from purpleifypdf.typing.enums import MessageCategory, Quality
from purpleifypdf.typing.models import (
    DEFAULT_BACKGROUND_COLOR,
    Color,
    DoneMessage,
    ErrorMessage,
    ImagesMetadata,
    PageRange,
    PortOptions,
    Status,
    TransformationOptions,
)
from purpleifypdf.typing.protocol import DocumentLoader, SourceDocument

__all__ = [
    "DEFAULT_BACKGROUND_COLOR",
    "Color",
    "DocumentLoader",
    "DoneMessage",
    "ErrorMessage",
    "ImagesMetadata",
    "MessageCategory",
    "PageRange",
    "PortOptions",
    "Quality",
    "SourceDocument",
    "Status",
    "TransformationOptions",
]
