"""Length-prefixed message port driven by a host process over stdin/stdout.

Every frame, in both directions, is::

    u32 big-endian body length | 4-byte category | JSON body

Inbound `OPTS` frames set the options of the next transformation and an inbound
`DONE` frame runs it, answering with one `STAT` frame per rendered page and a
final `DONE` frame. Failures are reported as a single `ERRR` frame. Closing the
inbound stream shuts the port down cleanly.
"""

from __future__ import annotations

import struct
import sys
from pathlib import Path
from typing import IO, TYPE_CHECKING, NamedTuple

from pydantic import BaseModel, ValidationError

from purpleifypdf.exceptions import PackageError, ReceivingError, error_chain
from purpleifypdf.logging import configure_logging, document_context, get_logger
from purpleifypdf.pdf_render import load_document
from purpleifypdf.pipeline import Progress, transform
from purpleifypdf.streams import read_exactly
from purpleifypdf.typing.enums import MessageCategory
from purpleifypdf.typing.models import DoneMessage, ErrorMessage, PortOptions, Status

if TYPE_CHECKING:
    from purpleifypdf.typing.protocol import DocumentLoader

logger = get_logger(__name__)

_LENGTH = struct.Struct(">I")
CATEGORY_SIZE = 4


class Frame(NamedTuple):
    """One inbound frame."""

    category: bytes
    body: bytes


def read_frame(stream: IO[bytes]) -> Frame | None:
    """Read one frame.

    Args:
        stream (IO[bytes]): Inbound binary stream.

    Raises:
        ReceivingError: If the stream ends inside a frame or the body has no category.

    Returns:
        Frame | None: The frame, or None when the stream closed between frames.
    """
    prefix = read_exactly(stream, _LENGTH.size)
    if not prefix:
        return None
    if len(prefix) < _LENGTH.size:
        raise ReceivingError(message="Stream closed inside a frame length prefix")

    (length,) = _LENGTH.unpack(prefix)
    body = read_exactly(stream, length)
    if len(body) < length:
        raise ReceivingError(message=f"Stream closed inside a frame: expected {length} bytes, got {len(body)}")
    if length < CATEGORY_SIZE:
        raise ReceivingError(message=f"Frame of {length} bytes is too short to hold a category")
    return Frame(category=body[:CATEGORY_SIZE], body=body[CATEGORY_SIZE:])


def write_frame(stream: IO[bytes], category: MessageCategory, payload: BaseModel) -> None:
    """Serialize and send one frame, flushing the stream.

    Args:
        stream (IO[bytes]): Outbound binary stream.
        category (MessageCategory): Frame category.
        payload (BaseModel): Frame body.
    """
    body = category.to_tag() + payload.model_dump_json().encode("utf-8")
    stream.write(_LENGTH.pack(len(body)) + body)
    stream.flush()


class Port:
    """Serve transformation requests from a host process."""

    def __init__(
        self,
        inbound: IO[bytes],
        outbound: IO[bytes],
        *,
        loader: DocumentLoader = load_document,
    ) -> None:
        self._inbound = inbound
        self._outbound = outbound
        self._loader = loader
        self._options: PortOptions | None = None

    def serve(self) -> None:
        """Handle frames until the inbound stream closes."""
        logger.info("Port listening")
        while True:
            try:
                frame = read_frame(self._inbound)
            except ReceivingError as exc:
                self._report(exc)
                continue
            except OSError as exc:
                # Nothing more can be read once the inbound stream itself fails.
                self._report(exc)
                return

            if frame is None:
                logger.info("Inbound stream closed, port shutting down")
                return

            try:
                self.handle(frame)
            except (PackageError, OSError) as exc:
                self._report(exc)

    def handle(self, frame: Frame) -> None:
        """Handle one inbound frame.

        Raises:
            ReceivingError: If the frame is malformed, of an unknown category, or out of order.
            TransformationError: If the transformation fails.
            OSError: If a file or the outbound stream cannot be used.
        """
        try:
            category = MessageCategory.from_tag(frame.category)
        except ValueError as exc:
            raise ReceivingError(message=str(exc)) from exc

        if category is MessageCategory.OPTIONS:
            self._options = _parse_options(frame.body)
            logger.debug("Options received", extra={"quality": self._options.quality.to_str()})
        elif category is MessageCategory.DONE:
            if self._options is None:
                raise ReceivingError(message="Missing options")
            self._run(self._options)
        else:
            raise ReceivingError(message=f"Unexpected inbound message category: {category.value}")

    def send(self, category: MessageCategory, payload: BaseModel) -> None:
        write_frame(self._outbound, category, payload)

    def _run(self, options: PortOptions) -> None:
        with document_context(in_file=options.in_file, quality=options.quality.to_str()):
            in_blob = Path(options.in_file).read_bytes()
            step = transform(
                in_blob,
                options.page_range,
                options.quality,
                options.background_color,
                loader=self._loader,
            )
            while isinstance(step := step.next(), Progress):
                self.send(MessageCategory.STATUS, Status(percent_done=step.percent_done))

            document = step.result()
            Path(options.out_file).write_bytes(document.data)
            self.send(MessageCategory.DONE, DoneMessage(original_title=document.original_title))
            logger.info("Transformation delivered", extra={"out_file": options.out_file})

    def _report(self, exc: BaseException) -> None:
        message = ": ".join(error_chain(exc))
        logger.error("Request failed", extra={"error": message})
        try:
            self.send(MessageCategory.ERROR, ErrorMessage(message=message))
        except Exception:  # noqa: BLE001
            # Never re-enter error reporting from here.
            logger.warning("Failed to report error to host")


def _parse_options(body: bytes) -> PortOptions:
    try:
        return PortOptions.model_validate_json(body)
    except ValidationError as exc:
        raise ReceivingError(message=f"Invalid options: {exc.error_count()} validation error(s)") from exc


def main() -> int:
    """Run the port on stdin/stdout.

    Returns:
        int: Exit code.
    """
    configure_logging()
    Port(sys.stdin.buffer, sys.stdout.buffer).serve()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
