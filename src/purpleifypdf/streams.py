"""Binary stream helpers."""

from __future__ import annotations

from typing import IO


def read_exactly(stream: IO[bytes], size: int) -> bytes:
    """Read `size` bytes, stopping early only when the stream ends.

    Args:
        stream (IO[bytes]): Readable binary stream.
        size (int): Number of bytes wanted.

    Returns:
        bytes: Up to `size` bytes; fewer means the stream ended.
    """
    chunks = bytearray()
    while len(chunks) < size:
        chunk = stream.read(size - len(chunks))
        if not chunk:
            break
        chunks += chunk
    return bytes(chunks)
