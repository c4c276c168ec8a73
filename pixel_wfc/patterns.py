"""Share codes for small input patterns, and the built-in default pattern.

A share code is the pattern's row-major RGB bytes in URL-safe base64
with the trailing ``=`` padding removed, short enough to pass around
in a URL or on the command line.
"""

from __future__ import annotations

import base64
import binascii
import math

import numpy as np

from pixel_wfc.tiles import as_image

DEFAULT_PATTERN_SIZE = 6


def default_pattern(size: int = DEFAULT_PATTERN_SIZE) -> np.ndarray:
    """White square with a black 2x2 block at rows/cols 1..2."""
    pattern = np.full((size, size, 3), 255, dtype=np.uint8)
    pattern[1:3, 1:3] = 0
    return pattern


def encode_pattern(image: object) -> str:
    """Encode an (H, W, 3) pattern as an unpadded URL-safe base64 string."""
    raw = as_image(image).tobytes()
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_pattern(code: str, size: int | None = None) -> np.ndarray:
    """Decode a share code into a (size, size, 3) uint8 pattern.

    Args:
        code: String produced by :func:`encode_pattern`.
        size: Expected side length; inferred from the payload if None.

    Raises:
        ValueError: the code is not valid base64 or has the wrong length.
    """
    padded = code.strip() + "=" * (-len(code.strip()) % 4)
    try:
        raw = base64.b64decode(padded, altchars=b"-_", validate=True)
    except binascii.Error as exc:
        msg = f"Invalid pattern code: {exc}"
        raise ValueError(msg) from exc

    if size is None:
        size = math.isqrt(len(raw) // 3)
    if size < 1 or len(raw) != size * size * 3:
        msg = f"Pattern code holds {len(raw)} bytes, expected a square RGB pattern"
        if size >= 1:
            msg += f" of {size * size * 3} bytes"
        raise ValueError(msg)

    return np.frombuffer(raw, dtype=np.uint8).reshape(size, size, 3).copy()
