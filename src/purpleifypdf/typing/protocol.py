"""Renderer interfaces."""

from __future__ import annotations

from typing import Protocol


class SourceDocument(Protocol):
    """A parsed document that can rasterize its pages.

    Implementations own the byte buffer they were parsed from for as long as the
    handle is open.
    """

    @property
    def page_count(self) -> int:
        """Number of pages in the document."""

    @property
    def title(self) -> str:
        """Document title, empty when the document has none."""

    def page_size(self, index: int) -> tuple[float, float]:
        """Return the natural (width, height) of a page in points.

        Args:
            index: Zero-based page index.
        """

    def rasterize(self, index: int, *, width_px: int, height_px: int, scale: float) -> bytearray:
        """Render a page onto a white backdrop.

        Args:
            index: Zero-based page index.
            width_px: Width of the target surface in pixels.
            height_px: Height of the target surface in pixels.
            scale: Pixels per point.

        Returns:
            bytearray: `width_px * height_px` pixels, 4 bytes each, in (b, g, r, a) order.
        """

    def close(self) -> None:
        """Release the document handle."""


class DocumentLoader(Protocol):
    """Parses raw document bytes."""

    def __call__(self, data: bytes) -> SourceDocument:
        """Open a document from bytes.

        Args:
            data: Raw document bytes.

        Returns:
            SourceDocument: Parsed document.
        """
