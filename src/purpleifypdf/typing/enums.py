"""Project enums."""

from __future__ import annotations

from enum import StrEnum


class _EnumMixin(StrEnum):
    """Shared conversion helpers for user-facing enums."""

    @classmethod
    def from_str(cls, value: str) -> _EnumMixin:
        """Parse enum from string, ignoring case.

        Args:
            value: Raw string value.

        Raises:
            ValueError: If the value is not supported.

        Returns:
            _EnumMixin: Parsed enum value.
        """
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            supported = ", ".join(member.value for member in cls)
            message = f"Unsupported {cls.__name__} value '{value}'. Expected one of: {supported}"
            raise ValueError(message) from exc

    def to_str(self) -> str:
        """Return string representation.

        Returns:
            str: Enum string value.
        """
        return self.value


class Quality(_EnumMixin):
    """Rendering quality, each level bound to a fixed pixel density."""

    EXTREME = "extreme"
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"
    EXTREME_LOW = "extremelow"

    @property
    def ppi(self) -> float:
        """Pixels per inch rendered at this quality."""
        return _PPI_BY_QUALITY[self]


_PPI_BY_QUALITY: dict[Quality, float] = {
    Quality.EXTREME: 400.0,
    Quality.HIGH: 200.0,
    Quality.NORMAL: 120.0,
    Quality.LOW: 72.0,
    Quality.EXTREME_LOW: 10.0,
}


class MessageCategory(StrEnum):
    """Four-byte category tags of host port frames."""

    OPTIONS = "OPTS"
    DONE = "DONE"
    STATUS = "STAT"
    ERROR = "ERRR"

    @classmethod
    def from_tag(cls, tag: bytes) -> MessageCategory:
        """Parse a raw frame tag.

        Raises:
            ValueError: If the tag is not a known category.
        """
        try:
            return cls(tag.decode("ascii"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise ValueError(f"Unrecognized message category: {tag!r}") from exc

    def to_tag(self) -> bytes:
        """Return the raw four-byte tag."""
        return self.value.encode("ascii")
