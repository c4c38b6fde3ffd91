"""
DLF (level layout) encoder.

DANAE_LS_HEADER is stored uncompressed; scenes, interactive objects, fogs and
paths follow in the compressed part. Lighting is written to the LLF file, so
the DLF lighting flag and light count stay 0.
"""

from .binio import check_size, fixed_string, le_f32, le_i16, le_i32, le_u32, le_vec3, zeros
from .constants import (
    DLF_FOG_SIZE,
    DLF_HEADER_SIZE,
    DLF_IDENT,
    DLF_INTERACTIVE_OBJECT_SIZE,
    DLF_PATH_SIZE,
    DLF_PATHWAY_SIZE,
    DLF_SCENE_SIZE,
    DLF_VERSION,
)
from .records import DlfRecord, Fog, InteractiveObject, Path


def scene_name(level_idx: int) -> str:
    return f"Graph\\Levels\\Level{level_idx}\\"


def _encode_header(dlf: DlfRecord) -> bytes:
    out = bytearray()
    out += le_f32(DLF_VERSION)
    out += fixed_string(DLF_IDENT, 16)
    out += fixed_string(dlf.last_user, 256)
    out += le_i32(dlf.time)
    out += le_vec3(dlf.player_position)
    out += le_vec3(dlf.player_orientation)
    out += le_i32(1)                                # nb_scn
    out += le_i32(len(dlf.interactive_objects))     # nb_inter
    out += le_i32(0)                                # nb_nodes
    out += le_i32(0)                                # nb_nodeslinks
    out += le_i32(len(dlf.zones))                   # nb_zones
    out += le_i32(0)                                # lighting
    out += zeros(256 * 4)                           # Bpad
    out += le_i32(0)                                # nb_lights
    out += le_i32(len(dlf.fogs))                    # nb_fogs
    out += le_i32(dlf.number_of_background_polygons)
    out += le_i32(0)                                # nb_ignoredpolys
    out += le_i32(0)                                # nb_childpolys
    out += le_i32(len(dlf.paths) + len(dlf.zones))  # nb_paths, zones are paths with a height
    out += zeros(250 * 4)                           # pad
    out += le_vec3((0.0, 0.0, 0.0))                 # offset
    out += zeros(253 * 4)                           # fpad
    out += zeros(4096)                              # cpad
    out += zeros(256 * 4)                           # bpad
    check_size(out, DLF_HEADER_SIZE, "DANAE_LS_HEADER")
    return bytes(out)


def _encode_scene(level_idx: int) -> bytes:
    out = fixed_string(scene_name(level_idx), 512) + zeros(16 * 4) + zeros(16 * 4)
    check_size(out, DLF_SCENE_SIZE, "DANAE_LS_SCENE")
    return out


def _encode_interactive_object(obj: InteractiveObject) -> bytes:
    out = bytearray()
    out += fixed_string(obj.name, 512)
    out += le_vec3(obj.position)
    out += le_vec3(obj.orientation)
    out += le_i32(obj.identifier)
    out += le_i32(obj.flags)
    out += zeros(14 * 4)
    out += zeros(16 * 4)
    check_size(out, DLF_INTERACTIVE_OBJECT_SIZE, "DANAE_LS_INTER")
    return bytes(out)


def _encode_fog(fog: Fog) -> bytes:
    out = bytearray()
    out += le_vec3(fog.position)
    out += le_vec3(fog.color)
    out += le_f32(fog.size)
    out += le_i32(fog.special)
    out += le_f32(fog.scale)
    out += le_vec3(fog.move)
    out += le_vec3(fog.orientation)
    out += le_f32(fog.speed)
    out += le_f32(fog.rotate_speed)
    out += le_i32(fog.to_live)
    out += le_i32(fog.blend)
    out += le_f32(fog.frequency)
    out += zeros(32 * 4)
    out += zeros(32 * 4)
    out += zeros(256)
    check_size(out, DLF_FOG_SIZE, "DANAE_LS_FOG")
    return bytes(out)


def _encode_path(path: Path, idx: int) -> bytes:
    out = bytearray()
    out += fixed_string(path.name, 64)
    out += le_i16(idx)
    out += le_i16(path.flags)
    out += le_vec3(path.position)  # initpos
    out += le_vec3(path.position)  # pos
    out += le_i32(len(path.pathways))
    out += le_vec3(path.color)
    out += le_f32(path.far_clip)
    out += le_f32(path.reverb)
    out += le_f32(path.ambiance_max_volume)
    out += zeros(26 * 4)
    out += le_i32(path.height)
    out += zeros(31 * 4)
    out += fixed_string(path.ambiance, 128)
    out += zeros(128)
    check_size(out, DLF_PATH_SIZE, "DANAE_LS_PATH")

    for pathway in path.pathways:
        way = bytearray()
        way += le_vec3(pathway.position)
        way += le_i32(pathway.flag)
        way += le_u32(pathway.time)
        way += zeros(2 * 4)
        way += zeros(2 * 4)
        way += zeros(32)
        check_size(way, DLF_PATHWAY_SIZE, "DANAE_LS_PATHWAYS")
        out += way
    return bytes(out)


def encode_dlf(dlf: DlfRecord) -> bytes:
    out = bytearray(_encode_header(dlf))
    out += _encode_scene(dlf.level_idx)
    for obj in dlf.interactive_objects:
        out += _encode_interactive_object(obj)
    for fog in dlf.fogs:
        out += _encode_fog(fog)
    for idx, path in enumerate(dlf.paths + dlf.zones):
        out += _encode_path(path, idx)
    return bytes(out)


def dlf_header_size(raw: bytes) -> int:
    return DLF_HEADER_SIZE
