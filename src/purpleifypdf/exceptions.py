"""Package exceptions."""

from __future__ import annotations

from dataclasses import dataclass


class PackageError(Exception):
    """Root exception for the package."""


@dataclass(frozen=True)
class SettingsError(PackageError):
    """Raised when settings cannot be loaded or validated."""

    message: str = "Failed to load settings"
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.exc}" if self.exc else self.message


@dataclass(frozen=True)
class DependencyError(PackageError):
    """Raised when optional runtime dependencies are missing."""

    missing_package: list[str]
    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Missing runtime dependencies for '{self.message}': {', '.join(self.missing_package)}"


@dataclass(eq=False)
class TransformationError(PackageError):
    """Raised when a document transformation cannot proceed.

    Every subclass is terminal for the document being transformed. Instances stay
    mutable: context managers they unwind through reassign `__traceback__`.
    """

    message: str = "Transformation failed"

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(eq=False)
class ReceivingError(TransformationError):
    """Raised when input handed to the host port is malformed."""

    message: str = "Error receiving the PDF"


@dataclass(eq=False)
class RenderError(TransformationError):
    """Raised when the renderer cannot read the document."""

    message: str = "Error reading the PDF"


@dataclass(eq=False)
class UnknownRenderError(TransformationError):
    """Raised when rasterization fails without a specific reason."""

    message: str = "Unknown error while rendering the PDF"


@dataclass(eq=False)
class NonexistentPageError(TransformationError):
    """Raised when a page index is out of bounds."""

    page: int = 0
    message: str = ""

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message or f"Page {self.page} does not exist"


@dataclass(eq=False)
class PixelReadError(TransformationError):
    """Raised when a rendered pixel buffer cannot be read back."""

    message: str = "Error reading the pixels of a rendered page"


@dataclass(eq=False)
class InsufficientMemoryError(TransformationError):
    """Raised when a pixel buffer cannot be reinterpreted as an image."""

    message: str = "Insufficient memory"


@dataclass(eq=False)
class PdfWriteError(TransformationError):
    """Raised when transformed pages cannot be assembled into a PDF."""

    message: str = "Error writing the transformed pages"


@dataclass(eq=False)
class ZeroPagePdfError(TransformationError):
    """Raised when the input document has no pages."""

    message: str = "PDF has zero pages"


@dataclass(eq=False)
class ImageEncodingError(TransformationError):
    """Raised when a transformed page cannot be encoded as an image."""

    message: str = "Error outputting the transformed page as an image"


def error_chain(exc: BaseException) -> list[str]:
    """List the messages of an exception and of every exception that caused it.

    Args:
        exc (BaseException): Outermost exception.

    Returns:
        list[str]: Messages, outermost first.
    """
    messages: list[str] = []
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        text = str(current) or type(current).__name__
        messages.append(text)
        current = current.__cause__ or current.__context__
    return messages
