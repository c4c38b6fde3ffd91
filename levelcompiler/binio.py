"""Little-endian packing helpers shared by the level file encoders."""

import struct
from typing import Iterable, Sequence


def le_i16(v: int) -> bytes:
    """Little-endian signed 16-bit integer"""
    return struct.pack('<h', v)


def le_i32(v: int) -> bytes:
    """Little-endian signed 32-bit integer"""
    return struct.pack('<i', v)


def le_u32(val: int) -> bytes:
    """Little-endian unsigned 32-bit integer"""
    return struct.pack('<I', val & 0xFFFFFFFF)


def le_f32(val: float) -> bytes:
    """Little-endian 32-bit float"""
    return struct.pack('<f', float(val))


def le_vec3(v: Sequence[float]) -> bytes:
    return struct.pack('<fff', float(v[0]), float(v[1]), float(v[2]))


def le_i32_array(values: Iterable[int]) -> bytes:
    values = list(values)
    return struct.pack(f'<{len(values)}i', *values)


def zeros(size: int) -> bytes:
    return b'\x00' * size


def fixed_string(value, size: int) -> bytes:
    """NUL padded Latin-1 string field of exactly *size* bytes."""
    raw = value if isinstance(value, bytes) else value.encode('latin-1')
    if len(raw) > size:
        raise ValueError(f"String of {len(raw)} bytes does not fit a {size} byte field: {value!r}")
    return raw + b'\x00' * (size - len(raw))


def check_size(data: bytes, expected: int, record: str) -> bytes:
    if len(data) != expected:
        raise ValueError(f"{record} record is {len(data)} bytes, expected {expected}")
    return data
