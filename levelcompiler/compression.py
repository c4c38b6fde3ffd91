"""PKWARE DCL implode, the codec Arx uses for level file bodies."""

from typing import Callable

from .constants import IMPLODE_DICTIONARY_LARGE, IMPLODE_DICTIONARY_SIZES, IMPLODE_MODE_BINARY
from .errors import CompressionError

Compressor = Callable[[bytes], bytes]


def implode(body: bytes, mode: str = IMPLODE_MODE_BINARY, dictionary: str = IMPLODE_DICTIONARY_LARGE) -> bytes:
    """Compress *body* with PKWARE DCL implode (binary mode, 4 KiB dictionary by default)."""
    try:
        import dclimplode
    except ImportError as e:
        raise CompressionError(
            f"A required library is missing. -> {e}. "
            "Please install it using: pip install dclimplode"
        ) from e

    if mode == IMPLODE_MODE_BINARY:
        cmp_type = dclimplode.CMP_BINARY
    elif mode == "ascii":
        cmp_type = dclimplode.CMP_ASCII
    else:
        raise ValueError(f"Unknown implode mode: {mode}")

    if dictionary not in IMPLODE_DICTIONARY_SIZES:
        raise ValueError(f"Unknown implode dictionary size: {dictionary}")

    try:
        compressor = dclimplode.compressobj(cmp_type, IMPLODE_DICTIONARY_SIZES[dictionary])
        return compressor.compress(bytes(body)) + compressor.flush()
    except Exception as e:
        raise CompressionError(f"Implode failed on {len(body)} bytes: {e}") from e
