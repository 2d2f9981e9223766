"""Pull-based stream of transformed page images.

The stream is a sequence of blocks, each a header followed by its payload::

    b"PPDF" | u32 big-endian offset to next header | b"MET" or b"IMG" | payload

The offset counts the header itself plus the payload. The first block is always
the only `MET` block, a JSON `ImagesMetadata` record. Every following block is an
`IMG` block holding one PNG page, in ascending page order.
"""

from __future__ import annotations

import io
import struct
from typing import IO, TYPE_CHECKING, ClassVar, Self

from purpleifypdf.exceptions import ReceivingError
from purpleifypdf.logging import get_logger
from purpleifypdf.pdf_render import load_document
from purpleifypdf.streams import read_exactly
from purpleifypdf.transformation import TransformationState
from purpleifypdf.typing.models import ImagesMetadata

if TYPE_CHECKING:
    from collections.abc import Iterator

    from purpleifypdf.typing.enums import Quality
    from purpleifypdf.typing.models import Color, PageRange
    from purpleifypdf.typing.protocol import DocumentLoader

logger = get_logger(__name__)

HEADER_PREFIX = b"PPDF"
HEADER_META_POSTFIX = b"MET"
HEADER_IMG_POSTFIX = b"IMG"
_OFFSET = struct.Struct(">I")
_OFFSET_MAX = 2**32 - 1
HEADER_SIZE = len(HEADER_PREFIX) + _OFFSET.size + len(HEADER_META_POSTFIX)


class ImageHeader:
    """Header introducing one block of an image stream."""

    POSTFIXES: ClassVar[tuple[bytes, ...]] = (HEADER_META_POSTFIX, HEADER_IMG_POSTFIX)

    def __init__(self, postfix: bytes, size: int) -> None:
        if postfix not in self.POSTFIXES:
            raise ValueError(f"Unknown header postfix: {postfix!r}")
        if not 0 <= size <= _OFFSET_MAX - HEADER_SIZE:
            raise ValueError(f"Payload of {size} bytes does not fit in a header")
        self.postfix = postfix
        self.size = size

    @property
    def offset_to_next_header(self) -> int:
        return self.size + HEADER_SIZE

    def to_bytes(self) -> bytes:
        return HEADER_PREFIX + _OFFSET.pack(self.offset_to_next_header) + self.postfix

    @classmethod
    def from_bytes(cls, raw: bytes) -> Self:
        """Parse a header.

        Raises:
            ReceivingError: If the bytes are not a valid header.
        """
        if len(raw) != HEADER_SIZE or not raw.startswith(HEADER_PREFIX):
            raise ReceivingError(message=f"Malformed image stream header: {raw!r}")
        (offset,) = _OFFSET.unpack_from(raw, len(HEADER_PREFIX))
        postfix = raw[len(HEADER_PREFIX) + _OFFSET.size :]
        if postfix not in cls.POSTFIXES or offset < HEADER_SIZE:
            raise ReceivingError(message=f"Malformed image stream header: {raw!r}")
        return cls(postfix, offset - HEADER_SIZE)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ImageHeader):
            return NotImplemented
        return (self.postfix, self.size) == (other.postfix, other.size)

    def __hash__(self) -> int:
        return hash((self.postfix, self.size))

    def __repr__(self) -> str:
        return f"ImageHeader(postfix={self.postfix!r}, size={self.size})"


class ImageStream(io.RawIOBase):
    """Readable stream rendering one page per refill of its staging buffer.

    Nothing is rendered until bytes are read, so the reader sets the pace.
    Rendering and encoding errors surface from `read` as `TransformationError`.
    """

    def __init__(self, transformation: TransformationState) -> None:
        super().__init__()
        self._transformation = transformation
        self._unread = bytearray()
        self._next_page = 0
        self._has_queued_metadata = False

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: bytearray | memoryview) -> int:  # type: ignore[override]
        if self.closed:
            raise ValueError("I/O operation on closed image stream")

        view = memoryview(buffer).cast("B")
        if not view:
            return 0

        if not self._has_queued_metadata:
            self._queue_metadata()

        if not self._unread:
            if not self._transformation.includes_offset(self._next_page):
                return 0
            self._queue_next_page()

        count = min(len(view), len(self._unread))
        view[:count] = self._unread[:count]
        del self._unread[:count]
        return count

    def close(self) -> None:
        if not self.closed:
            self._transformation.close()
        super().close()

    def _queue_metadata(self) -> None:
        trans = self._transformation
        meta = ImagesMetadata(original_title=trans.original_title, page_count=trans.page_count)
        payload = meta.model_dump_json(by_alias=True).encode("utf-8")
        self._queue_block(HEADER_META_POSTFIX, payload)
        self._has_queued_metadata = True

    def _queue_next_page(self) -> None:
        page = self._transformation.transform_page(self._next_page)
        image = page.to_png()
        self._queue_block(HEADER_IMG_POSTFIX, image)
        logger.debug("Page image queued", extra={"offset": self._next_page, "size_bytes": len(image)})
        self._next_page += 1

    def _queue_block(self, postfix: bytes, payload: bytes) -> None:
        self._unread += ImageHeader(postfix, len(payload)).to_bytes()
        self._unread += payload


def transform_images(
    in_blob: bytes,
    page_range: PageRange | None,
    quality: Quality,
    background_color: Color | None = None,
    *,
    loader: DocumentLoader = load_document,
) -> ImageStream:
    """Start a PDF to image stream transformation.

    Args:
        in_blob (bytes): Input PDF bytes.
        page_range (PageRange | None): Pages to stream; all pages when unset.
        quality (Quality): Rendering quality.
        background_color (Color | None): Replacement colour; purple when unset.
        loader (DocumentLoader): Document parser.

    Returns:
        ImageStream: Stream positioned before the metadata block.
    """
    state = TransformationState.try_new(in_blob, page_range, quality, background_color, loader=loader)
    return ImageStream(state)


def iter_blocks(stream: IO[bytes]) -> Iterator[tuple[ImageHeader, bytes]]:
    """Read an image stream back into `(header, payload)` blocks.

    Args:
        stream (IO[bytes]): Readable binary stream.

    Raises:
        ReceivingError: If a header is malformed or a block is truncated.

    Yields:
        tuple[ImageHeader, bytes]: Each block, in stream order.
    """
    while True:
        raw = read_exactly(stream, HEADER_SIZE)
        if not raw:
            return
        header = ImageHeader.from_bytes(raw)
        payload = read_exactly(stream, header.size)
        if len(payload) != header.size:
            raise ReceivingError(message=f"Truncated image stream block: expected {header.size} bytes")
        yield header, payload


def read_metadata(payload: bytes) -> ImagesMetadata:
    """Parse the payload of a `MET` block."""
    return ImagesMetadata.model_validate_json(payload)
