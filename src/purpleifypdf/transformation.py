"""Per-document transformation state and single-page rendering."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING, Self

from PIL import Image
from pydantic import BaseModel, ConfigDict

from purpleifypdf.exceptions import (
    ImageEncodingError,
    InsufficientMemoryError,
    NonexistentPageError,
    ZeroPagePdfError,
)
from purpleifypdf.logging import get_logger
from purpleifypdf.pdf_render import assemble_pdf, load_document
from purpleifypdf.processing.background import PIXEL_SIZE, normalize_background
from purpleifypdf.typing.models import DEFAULT_BACKGROUND_COLOR, Color, PageRange, TransformationOptions
from purpleifypdf.units import PageSize

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import TracebackType

    from purpleifypdf.typing.enums import Quality
    from purpleifypdf.typing.protocol import DocumentLoader, SourceDocument

logger = get_logger(__name__)


class TransformedPage(BaseModel):
    """A rendered, background-normalized page."""

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    image: Image.Image
    size: PageSize

    def to_png(self) -> bytes:
        """Encode the page as PNG.

        Raises:
            ImageEncodingError: If the codec fails.

        Returns:
            bytes: PNG bytes.
        """
        buffer = io.BytesIO()
        try:
            self.image.save(buffer, format="PNG")
        except (OSError, ValueError) as exc:
            raise ImageEncodingError(message=f"Failed to encode page as PNG: {exc}") from exc
        return buffer.getvalue()


class TransformationState:
    """A loaded document together with the options it is transformed with.

    The document handle never leaves this object, and it keeps the source bytes
    alive for as long as the handle is open.
    """

    def __init__(self, document: SourceDocument, options: TransformationOptions) -> None:
        self._document = document
        self._options = options
        self._original_title = document.title
        self._page_count = document.page_count

    @classmethod
    def try_new(
        cls,
        in_blob: bytes,
        page_range: PageRange | None,
        quality: Quality,
        background_color: Color | None = None,
        *,
        loader: DocumentLoader = load_document,
    ) -> Self:
        """Parse a document and fix the options of its transformation.

        Args:
            in_blob (bytes): Input PDF bytes.
            page_range (PageRange | None): Pages to transform; all pages when unset.
            quality (Quality): Rendering quality.
            background_color (Color | None): Replacement colour; purple when unset.
            loader (DocumentLoader): Document parser.

        Raises:
            RenderError: If the document cannot be parsed.
            ZeroPagePdfError: If the document has no pages.

        Returns:
            TransformationState: Ready-to-render state.
        """
        document = loader(in_blob)
        page_count = document.page_count
        if page_count == 0:
            document.close()
            raise ZeroPagePdfError

        options = TransformationOptions(
            quality=quality,
            background_color=DEFAULT_BACKGROUND_COLOR if background_color is None else background_color,
            page_range=PageRange.all_pages(page_count) if page_range is None else page_range,
        )
        logger.info(
            "Transformation prepared",
            extra={
                "pages": page_count,
                "quality": options.quality.to_str(),
                "starting_index": options.page_range.starting_index,
                "count": options.page_range.count,
            },
        )
        return cls(document, options)

    @property
    def original_title(self) -> str:
        return self._original_title

    @property
    def page_count(self) -> int:
        return self._page_count

    @property
    def options(self) -> TransformationOptions:
        return self._options

    def includes_offset(self, offset: int) -> bool:
        """Return whether `offset` from the range start is selected for transformation."""
        return self._options.page_range.includes(offset, self._page_count)

    def transform_page(self, offset: int) -> TransformedPage:
        """Render, normalize and decode one page.

        Args:
            offset (int): Offset from the start of the configured page range.

        Raises:
            NonexistentPageError: If the page is out of bounds.
            UnknownRenderError: If rasterization fails.
            PixelReadError: If the rendered buffer cannot be read back.
            InsufficientMemoryError: If the buffer cannot be turned into an image.

        Returns:
            TransformedPage: The transformed page.
        """
        page_num = self._options.page_range.starting_index + offset
        if offset < 0 or page_num >= self._page_count:
            raise NonexistentPageError(page=page_num)

        width, height = self._document.page_size(page_num)
        size = PageSize.for_quality(width, height, self._options.quality)

        # Always rasterized onto white so the normalizer sees ink on white.
        data = self._document.rasterize(
            page_num,
            width_px=size.width_px,
            height_px=size.height_px,
            scale=size.scale_factor,
        )
        replaced = normalize_background(data, self._options.background_color)
        image = _bgra_to_rgb_image(data, size)

        logger.debug(
            "Page transformed",
            extra={"page": page_num, "size": size.describe(), "background_pixels": replaced},
        )
        return TransformedPage(image=image, size=size)

    def to_pdf(self, pages: Sequence[TransformedPage]) -> bytes:
        """Reassemble transformed pages into one PDF, in order.

        Args:
            pages (Sequence[TransformedPage]): Pages to write.

        Raises:
            PdfWriteError: If the document cannot be written.

        Returns:
            bytes: PDF bytes.
        """
        blob = assemble_pdf(
            (
                (page.size.width_mm, page.size.height_mm, page.image.width, page.image.height, page.image.tobytes())
                for page in pages
            ),
            title=self._original_title,
        )
        logger.info("PDF reassembled", extra={"pages": len(pages), "size_bytes": len(blob)})
        return blob

    def close(self) -> None:
        """Release the document handle."""
        self._document.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def _bgra_to_rgb_image(data: bytearray, size: PageSize) -> Image.Image:
    """Reinterpret a BGRA buffer as an RGB image of the page's pixel size.

    Raises:
        InsufficientMemoryError: If the buffer does not match the expected dimensions.
    """
    expected = size.width_px * size.height_px * PIXEL_SIZE
    if len(data) != expected:
        raise InsufficientMemoryError(
            message=f"Pixel buffer holds {len(data)} bytes, expected {expected} for {size.describe()}",
        )
    try:
        image = Image.frombytes("RGBA", (size.width_px, size.height_px), bytes(data), "raw", "BGRA")
    except (MemoryError, ValueError) as exc:
        raise InsufficientMemoryError from exc
    return image.convert("RGB")


def transform_page_png(
    in_blob: bytes,
    page: int,
    quality: Quality,
    background_color: Color | None = None,
    *,
    loader: DocumentLoader = load_document,
) -> bytes:
    """Transform a single page of a whole document and encode it as PNG.

    Args:
        in_blob (bytes): Input PDF bytes.
        page (int): Zero-based page index.
        quality (Quality): Rendering quality.
        background_color (Color | None): Replacement colour; purple when unset.
        loader (DocumentLoader): Document parser.

    Returns:
        bytes: PNG bytes.
    """
    with TransformationState.try_new(in_blob, None, quality, background_color, loader=loader) as state:
        return state.transform_page(page).to_png()
