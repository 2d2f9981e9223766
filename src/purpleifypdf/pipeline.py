"""Step-at-a-time PDF to PDF transformation with progress reporting.

A transformation starts as a `Progress` with no pages rendered. Each call to
`Progress.next()` renders one page of the selected range and returns the next
`Progress`, until the range is exhausted and the pages are reassembled into a
`Complete`. Any failure ends the walk with a `Complete` carrying the error.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from pydantic import BaseModel, ConfigDict

from purpleifypdf.exceptions import TransformationError
from purpleifypdf.logging import get_logger
from purpleifypdf.pdf_render import load_document
from purpleifypdf.transformation import TransformationState, TransformedPage

if TYPE_CHECKING:
    from purpleifypdf.typing.enums import Quality
    from purpleifypdf.typing.models import Color, PageRange
    from purpleifypdf.typing.protocol import DocumentLoader

logger = get_logger(__name__)


class TransformedDocument(BaseModel):
    """Reassembled output of a finished transformation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    original_title: str
    data: bytes


class Complete:
    """Terminal step: either the reassembled document or the error that ended the walk."""

    def __init__(
        self,
        *,
        document: TransformedDocument | None = None,
        error: TransformationError | None = None,
    ) -> None:
        if (document is None) == (error is None):
            raise ValueError("Complete needs exactly one of document or error")
        self.document = document
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None

    def result(self) -> TransformedDocument:
        """Return the document, raising the carried error instead when there is one."""
        if self.error is not None:
            raise self.error
        return cast("TransformedDocument", self.document)


class Progress:
    """Non-terminal step of a transformation."""

    def __init__(
        self,
        state: TransformationState,
        transformed_pages: list[TransformedPage],
        next_offset: int,
    ) -> None:
        self._state = state
        self._transformed_pages = transformed_pages
        self._next_offset = next_offset
        self._consumed = False
        # The extra step in the denominator is the reassembly that follows the last page.
        self._percent = next_offset / (state.options.page_range.count + 1)

    @property
    def percent_done(self) -> float:
        return self._percent

    @property
    def next_offset(self) -> int:
        """Offset from the range start of the next page to transform."""
        return self._next_offset

    @property
    def pages_done(self) -> int:
        return len(self._transformed_pages)

    @property
    def original_title(self) -> str:
        return self._state.original_title

    def next(self) -> Progress | Complete:
        """Advance by one step. A `Progress` can only be advanced once.

        Raises:
            RuntimeError: If this step was already advanced.

        Returns:
            Progress | Complete: The following step.
        """
        if self._consumed:
            raise RuntimeError("This transformation step has already been advanced")
        self._consumed = True

        state = self._state
        offset = self._next_offset

        if not state.includes_offset(offset):
            return self._complete()

        try:
            page = state.transform_page(offset)
        except TransformationError as exc:
            logger.warning("Page transformation failed", extra={"offset": offset, "error": str(exc)})
            state.close()
            return Complete(error=exc)

        self._transformed_pages.append(page)
        following = Progress(state, self._transformed_pages, offset + 1)
        logger.debug("Transformation progressed", extra={"offset": offset, "percent_done": following.percent_done})
        return following

    def finish(self) -> TransformedDocument:
        """Step until the transformation completes.

        Raises:
            TransformationError: The first error met along the way.

        Returns:
            TransformedDocument: The reassembled document.
        """
        step: Progress | Complete = self
        while isinstance(step, Progress):
            step = step.next()
        return step.result()

    def _complete(self) -> Complete:
        state = self._state
        try:
            data = state.to_pdf(self._transformed_pages)
        except TransformationError as exc:
            logger.warning("Reassembly failed", extra={"error": str(exc)})
            return Complete(error=exc)
        finally:
            state.close()

        logger.info(
            "Transformation complete",
            extra={"pages": len(self._transformed_pages), "size_bytes": len(data)},
        )
        return Complete(document=TransformedDocument(original_title=state.original_title, data=data))


type Update = Progress | Complete


def transform(
    in_blob: bytes,
    page_range: PageRange | None,
    quality: Quality,
    background_color: Color | None = None,
    *,
    loader: DocumentLoader = load_document,
) -> Progress:
    """Start a PDF to PDF transformation.

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
        Progress: The initial step, with nothing rendered yet.
    """
    state = TransformationState.try_new(in_blob, page_range, quality, background_color, loader=loader)
    return Progress(state, [], 0)
