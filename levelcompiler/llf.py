"""LLF (level lighting) encoder. The engine inflates the whole file, header included."""

import struct

from .binio import check_size, fixed_string, le_f32, le_i32, le_vec3, zeros
from .constants import LLF_HEADER_SIZE, LLF_IDENT, LLF_LIGHT_SIZE, LLF_RAW_HEADER_SIZE, LLF_VERSION
from .records import ArxColor, LlfRecord, Light


def _encode_header(llf: LlfRecord) -> bytes:
    out = bytearray()
    out += le_f32(LLF_VERSION)
    out += fixed_string(LLF_IDENT, 16)
    out += fixed_string(llf.last_user, 256)
    out += le_i32(llf.time)
    out += le_i32(len(llf.lights))
    out += le_i32(0)  # nb_Shadow_Polys
    out += le_i32(0)  # nb_IGNORED_Polys
    out += le_i32(llf.number_of_background_polygons)
    out += zeros(256 * 4)  # pad
    out += zeros(256 * 4)  # fpad
    out += zeros(4096)     # cpad
    out += zeros(256 * 4)  # bpad
    check_size(out, LLF_RAW_HEADER_SIZE, "DANAE_LLF_HEADER")
    return bytes(out)


def _encode_light(light: Light) -> bytes:
    out = bytearray()
    out += le_vec3(light.position)
    out += le_vec3(light.color)
    out += le_f32(light.fall_start)
    out += le_f32(light.fall_end)
    out += le_f32(light.intensity)
    out += le_f32(0.0)             # i
    out += le_vec3((0.0, 0.0, 0.0))  # ex_flicker
    out += zeros(5 * 4)            # ex_radius .. ex_flaresize
    out += zeros(24 * 4)
    out += le_i32(light.flags)     # extras
    out += zeros(31 * 4)
    check_size(out, LLF_LIGHT_SIZE, "DANAE_LS_LIGHT")
    return bytes(out)


def _encode_color(color: ArxColor) -> bytes:
    alpha = max(0, min(255, int(round(color.a * 255))))
    return struct.pack('<BBBB', color.b, color.g, color.r, alpha)


def encode_llf(llf: LlfRecord) -> bytes:
    out = bytearray(_encode_header(llf))
    for light in llf.lights:
        out += _encode_light(light)

    # DANAE_LS_LIGHTINGHEADER
    out += le_i32(len(llf.colors))
    out += le_i32(0)  # ViewMode
    out += le_i32(0)  # ModeLight
    out += le_i32(0)
    for color in llf.colors:
        out += _encode_color(color)
    return bytes(out)


def llf_header_size(raw: bytes) -> int:
    return LLF_HEADER_SIZE
