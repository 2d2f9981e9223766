"""PDF parsing, rasterization and reassembly backed by PyMuPDF."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING, Any

import numpy as np
from pypdf import PdfWriter

try:
    import pymupdf
except Exception:  # pragma: no cover - optional dependency at runtime
    pymupdf: Any
    pymupdf = None

from purpleifypdf.exceptions import PdfWriteError, RenderError, UnknownRenderError
from purpleifypdf.logging import get_logger
from purpleifypdf.units import millimeters_to_points

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = get_logger(__name__)

_BGRA = 4
_WHITE = 255


def _require_pymupdf() -> Any:
    if pymupdf is None:
        raise RenderError(message="PyMuPDF is required for PDF rendering")
    return pymupdf


class PyMuPdfDocument:
    """PyMuPDF document opened from an in-memory buffer.

    The buffer is held for the lifetime of the handle: MuPDF reads from it lazily.
    """

    def __init__(self, data: bytes) -> None:
        mupdf = _require_pymupdf()
        self._data = bytes(data)
        try:
            self._doc = mupdf.open(stream=self._data, filetype="pdf")
        except Exception as exc:
            raise RenderError(message=f"Error reading the PDF: {exc}") from exc

    @property
    def page_count(self) -> int:
        return len(self._doc)

    @property
    def title(self) -> str:
        metadata = self._doc.metadata or {}
        return metadata.get("title") or ""

    def page_size(self, index: int) -> tuple[float, float]:
        try:
            rect = self._doc.load_page(index).rect
        except Exception as exc:
            raise UnknownRenderError(message=f"Failed to load page {index}") from exc
        return float(rect.width), float(rect.height)

    def rasterize(self, index: int, *, width_px: int, height_px: int, scale: float) -> bytearray:
        mupdf = _require_pymupdf()
        try:
            page = self._doc.load_page(index)
            pix = page.get_pixmap(matrix=mupdf.Matrix(scale, scale), alpha=False)
        except Exception as exc:
            raise UnknownRenderError(message=f"Failed to render page {index}") from exc
        return composite_on_white(
            bytes(pix.samples),
            width=pix.width,
            height=pix.height,
            stride=pix.stride,
            channels=pix.n,
            target_width=width_px,
            target_height=height_px,
        )

    def close(self) -> None:
        self._doc.close()


def load_document(data: bytes) -> PyMuPdfDocument:
    """Open a PDF from raw bytes.

    Args:
        data (bytes): PDF bytes.

    Raises:
        RenderError: If PyMuPDF is unavailable or rejects the bytes.

    Returns:
        PyMuPdfDocument: Opened document.
    """
    document = PyMuPdfDocument(data)
    logger.debug("PDF opened", extra={"pages": document.page_count, "size_bytes": len(data)})
    return document


def composite_on_white(
    samples: bytes,
    *,
    width: int,
    height: int,
    stride: int,
    channels: int,
    target_width: int,
    target_height: int,
) -> bytearray:
    """Paint RGB samples onto a white BGRA surface of a fixed size.

    Samples falling outside the surface are dropped; surface area the samples do
    not cover stays white.

    Args:
        samples (bytes): Row-major samples, `channels` bytes per pixel (RGB first).
        width (int): Sample width in pixels.
        height (int): Sample height in pixels.
        stride (int): Bytes per sample row.
        channels (int): Bytes per sample pixel (3 or 4).
        target_width (int): Surface width in pixels.
        target_height (int): Surface height in pixels.

    Returns:
        bytearray: Surface pixels in (b, g, r, a) order.
    """
    surface = np.full((target_height, target_width, _BGRA), _WHITE, dtype=np.uint8)
    rows = np.frombuffer(samples, dtype=np.uint8)[: height * stride].reshape(height, stride)
    rgb = rows[:, : width * channels].reshape(height, width, channels)

    copy_h = min(height, target_height)
    copy_w = min(width, target_width)
    surface[:copy_h, :copy_w, :3] = rgb[:copy_h, :copy_w, 2::-1]
    return bytearray(surface.tobytes())


def assemble_pdf(pages: Iterable[tuple[float, float, int, int, bytes]], *, title: str) -> bytes:
    """Write page images into a new PDF, one image per page.

    Args:
        pages: `(width_mm, height_mm, width_px, height_px, rgb_samples)` per page, in order.
        title (str): Document title stored in the output metadata.

    Raises:
        PdfWriteError: If the document cannot be written.

    Returns:
        bytes: Serialized PDF.
    """
    mupdf = _require_pymupdf()
    try:
        out = mupdf.open()
    except Exception as exc:
        raise PdfWriteError(message=f"Failed to create output PDF: {exc}") from exc

    try:
        for width_mm, height_mm, width_px, height_px, samples in pages:
            page = out.new_page(width=millimeters_to_points(width_mm), height=millimeters_to_points(height_mm))
            pixmap = mupdf.Pixmap(mupdf.csRGB, width_px, height_px, samples, False)  # noqa: FBT003
            page.insert_image(page.rect, pixmap=pixmap)

        if out.page_count == 0:
            # PyMuPDF refuses to save a document without pages.
            return _empty_pdf(title)

        out.set_metadata({"title": title, "producer": "purpleifypdf"})
        return out.tobytes(garbage=3, deflate=True)
    except PdfWriteError:
        raise
    except Exception as exc:
        raise PdfWriteError(message=f"Failed to write output PDF: {exc}") from exc
    finally:
        out.close()


def _empty_pdf(title: str) -> bytes:
    writer = PdfWriter()
    writer.add_metadata({"/Title": title, "/Producer": "purpleifypdf"})
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()
