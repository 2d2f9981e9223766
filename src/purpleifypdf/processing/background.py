"""Replace near-white pixels of a rendered page with a solid background colour."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from purpleifypdf.exceptions import PixelReadError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from purpleifypdf.typing.models import Color

# Pixels are (b, g, r, a), the native byte order of the rasterizer.
PIXEL_SIZE = 4
COLOR_CHANNELS = 3
WHITE = 255

# Fixed policy: a pixel is background when no colour channel is 90 or more away
# from white (queen-wise distance, Mahama 2016,
# https://doi.org/10.2352/ISSN.2470-1173.2016.20.COLOR-349).
BACKGROUND_THRESHOLD = 90


def is_background(pixel: Sequence[int]) -> bool:
    """Return whether a single (b, g, r[, a]) pixel is near enough to white.

    Args:
        pixel: Channel values; only the first three are considered.

    Returns:
        bool: True when the pixel counts as background.
    """
    dissimilarity = max(abs(channel - WHITE) for channel in pixel[:COLOR_CHANNELS])
    return dissimilarity < BACKGROUND_THRESHOLD


def normalize_background(buffer: bytearray | memoryview | np.ndarray, color: Color) -> int:
    """Paint every background pixel of a BGRA buffer with `color`, in place.

    The alpha byte of every pixel is left untouched.

    Args:
        buffer: Writable pixel buffer, 4 bytes per pixel in (b, g, r, a) order.
        color: Replacement colour.

    Raises:
        PixelReadError: If the buffer is read-only or does not hold whole pixels.

    Returns:
        int: Number of pixels replaced.
    """
    if isinstance(buffer, np.ndarray):
        if buffer.dtype != np.uint8 or not buffer.flags.c_contiguous:
            raise PixelReadError(message="Pixel array must be a contiguous uint8 array")
        data = buffer.reshape(-1)
    else:
        data = np.frombuffer(buffer, dtype=np.uint8)
    if data.size % PIXEL_SIZE != 0:
        raise PixelReadError(
            message=f"Pixel buffer of {data.size} bytes does not hold whole {PIXEL_SIZE}-byte pixels",
        )
    if not data.flags.writeable:
        raise PixelReadError(message="Pixel buffer is read-only")

    pixels = data.reshape(-1, PIXEL_SIZE)
    channels = pixels[:, :COLOR_CHANNELS]
    # Channels never exceed white, so the distance to white is 255 - value.
    mask = (WHITE - channels.min(axis=1)) < BACKGROUND_THRESHOLD
    channels[mask] = color.to_bgr()
    return int(np.count_nonzero(mask))
