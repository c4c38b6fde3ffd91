"""
Binary compiler: encode each record, keep its header as is and implode the body.

    artifact = raw[:header_size] + implode(raw[header_size:])
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from .compression import Compressor, implode
from .constants import dlf_path, fts_path, llf_path
from .dlf import dlf_header_size, encode_dlf
from .errors import CompressionError, HeaderMismatchError
from .fts import encode_fts, fts_header_size
from .llf import encode_llf, llf_header_size
from .records import LevelData

HEADER_SIZE_CALCULATORS: Dict[str, Callable[[bytes], int]] = {
    "fts": fts_header_size,
    "dlf": dlf_header_size,
    "llf": llf_header_size,
}


def get_header_size(raw: bytes, fmt: str) -> int:
    """Size of the uncompressed prefix of an encoded *fmt* file."""
    try:
        calculator = HEADER_SIZE_CALCULATORS[fmt]
    except KeyError:
        raise ValueError(f"Unknown level file format: {fmt!r}") from None
    return calculator(raw)


def split_at(buffer: bytes, offset: int) -> Tuple[bytes, bytes]:
    """Split into two independent copies; the source buffer is not touched."""
    if offset < 0 or offset > len(buffer):
        raise HeaderMismatchError(
            f"Header offset {offset} lies outside of the {len(buffer)} byte buffer"
        )
    data = bytes(buffer)
    return data[:offset], data[offset:]


def compile_record(raw: bytes, fmt: str, compressor: Compressor = implode) -> bytes:
    header, body = split_at(raw, get_header_size(raw, fmt))
    try:
        compressed = compressor(body)
    except CompressionError:
        raise
    except Exception as e:
        raise CompressionError(f"Compressing the {fmt} body failed: {e}") from e
    return header + compressed


@dataclass(frozen=True)
class CompiledLevel:
    level_idx: int
    fts: bytes
    dlf: bytes
    llf: bytes

    def files(self) -> Dict[str, bytes]:
        """Artifacts keyed by their path relative to the game's data root."""
        return {
            fts_path(self.level_idx): self.fts,
            dlf_path(self.level_idx): self.dlf,
            llf_path(self.level_idx): self.llf,
        }


def compile_level(
    level_data: LevelData,
    compressor: Compressor = implode,
    log: Optional[Callable[[str], None]] = None,
) -> CompiledLevel:
    """Build all three level files; any failure aborts the whole set."""
    def _log(msg: str) -> None:
        if log is not None:
            log(msg)
        else:
            print(msg)

    artifacts: Dict[str, bytes] = {}
    for fmt, encode, record in (
        ("llf", encode_llf, level_data.llf),
        ("dlf", encode_dlf, level_data.dlf),
        ("fts", encode_fts, level_data.fts),
    ):
        raw = encode(record)
        artifacts[fmt] = compile_record(raw, fmt, compressor)
        _log(f"Compiled {fmt.upper()}: {len(raw)} bytes -> {len(artifacts[fmt])} bytes")

    return CompiledLevel(
        level_idx=level_data.fts.level_idx,
        fts=artifacts["fts"],
        dlf=artifacts["dlf"],
        llf=artifacts["llf"],
    )
