"""
FTS (fast scene) encoder.

Layout:
  UNIQUE_HEADER          path[256], count, version, uncompressedsize, pad[3]
  UNIQUE_HEADER3 x count path[256], check[512]
  --- compressed body ---
  FAST_SCENE_HEADER
  texture containers
  cells, z major: FAST_SCENE_INFO, polygons, anchor indices
  anchors
  rooms (nb_rooms + 1 entries, room 0 unused)
  room distances ((nb_rooms + 1)^2 entries)
"""

import struct
from typing import Dict, List, Tuple

from .binio import fixed_string, le_f32, le_i16, le_i32, le_i32_array, le_vec3, zeros
from .bucketing import get_cell_coords, is_inside_map
from .constants import (
    FTS_COUNT_OFFSET,
    FTS_PRIMARY_HEADER_SIZE,
    FTS_SECONDARY_HEADER_SIZE,
    FTS_VERSION,
    MAP_DEPTH_IN_CELLS,
    MAP_WIDTH_IN_CELLS,
    TEXTURE_DIRECTORY,
)
from .errors import HeaderMismatchError
from .records import Anchor, ArxPolygon, FtsRecord, Room, TextureContainer


def unique_header_path(level_idx: int) -> str:
    return f"C:\\ARX\\Game\\Graph\\Levels\\Level{level_idx}\\"


def _encode_polygon(polygon: ArxPolygon) -> bytes:
    out = bytearray()
    for vertex in polygon.vertices:
        # FAST_VERTEX stores y first
        out += struct.pack('<fffff', vertex.y, vertex.x, vertex.z, vertex.u, vertex.v)
    out += le_i32(polygon.texture_container_id)
    out += le_vec3(polygon.norm)
    out += le_vec3(polygon.norm2)
    for _ in range(4):
        out += le_vec3(polygon.norm)
    out += le_f32(polygon.transval)
    out += le_f32(polygon.area)
    out += le_i32(polygon.flags)
    out += le_i16(polygon.room)
    out += le_i16(0)
    return bytes(out)


def _encode_texture_container(container: TextureContainer) -> bytes:
    return le_i32(container.id) + le_i32(0) + fixed_string(TEXTURE_DIRECTORY + container.filename, 256)


def _encode_anchor(anchor: Anchor) -> bytes:
    out = bytearray()
    out += le_vec3(anchor.position)
    out += le_f32(anchor.radius)
    out += le_f32(anchor.height)
    out += le_i16(len(anchor.linked_anchors))
    out += le_i16(anchor.flags)
    out += le_i32_array(anchor.linked_anchors)
    return bytes(out)


def _encode_room(room: Room) -> bytes:
    out = bytearray()
    out += le_i32(len(room.portals))
    out += le_i32(len(room.polygons))
    out += zeros(6 * 4)
    out += le_i32_array(room.portals)
    for membership in room.polygons:
        out += struct.pack('<hhhh', membership.cell_x, membership.cell_y, membership.polygon_idx, 0)
    return bytes(out)


def _polygons_by_cell(polygons: List[ArxPolygon]) -> Dict[Tuple[int, int], List[ArxPolygon]]:
    by_cell: Dict[Tuple[int, int], List[ArxPolygon]] = {}
    for i, polygon in enumerate(polygons):
        cell = get_cell_coords(polygon.vertices, polygon.flags)
        if not is_inside_map(cell):
            raise ValueError(f"Polygon {i} lies in cell {cell}, outside of the map")
        by_cell.setdefault(cell, []).append(polygon)
    return by_cell


def _encode_body(fts: FtsRecord) -> bytes:
    expected_cells = MAP_WIDTH_IN_CELLS * MAP_DEPTH_IN_CELLS
    if len(fts.cells) != expected_cells:
        raise ValueError(f"FTS needs {expected_cells} cells, got {len(fts.cells)}")
    if not fts.rooms:
        raise ValueError("FTS needs at least the unused room 0")
    if len(fts.room_distances) != len(fts.rooms) ** 2:
        raise ValueError(
            f"{len(fts.rooms)} rooms need {len(fts.rooms) ** 2} room distances, got {len(fts.room_distances)}"
        )

    out = bytearray()

    # FAST_SCENE_HEADER
    out += le_f32(FTS_VERSION)
    out += le_i32(MAP_WIDTH_IN_CELLS)
    out += le_i32(MAP_DEPTH_IN_CELLS)
    out += le_i32(len(fts.texture_containers))
    out += le_i32(len(fts.polygons))
    out += le_i32(len(fts.anchors))
    out += le_vec3(fts.player_position)
    out += le_vec3(fts.scene_position)
    out += le_i32(0)  # portals
    out += le_i32(len(fts.rooms) - 1)

    for container in fts.texture_containers:
        out += _encode_texture_container(container)

    by_cell = _polygons_by_cell(fts.polygons)
    for z in range(MAP_DEPTH_IN_CELLS):
        for x in range(MAP_WIDTH_IN_CELLS):
            cell = fts.cells[z * MAP_WIDTH_IN_CELLS + x]
            polygons = by_cell.get((x, z), [])
            out += le_i32(len(polygons))
            out += le_i32(len(cell.anchors))
            for polygon in polygons:
                out += _encode_polygon(polygon)
            out += le_i32_array(cell.anchors)

    for anchor in fts.anchors:
        out += _encode_anchor(anchor)

    for room in fts.rooms:
        out += _encode_room(room)

    for distance in fts.room_distances:
        out += le_f32(distance.distance)
        out += le_vec3(distance.start_position)
        out += le_vec3(distance.end_position)

    return bytes(out)


def encode_fts(fts: FtsRecord) -> bytes:
    body = _encode_body(fts)

    out = bytearray()
    out += fixed_string(unique_header_path(fts.level_idx), 256)
    out += le_i32(len(fts.unique_headers))
    out += le_f32(FTS_VERSION)
    out += le_i32(len(body))
    out += zeros(3 * 4)

    for header in fts.unique_headers:
        out += fixed_string(header.path, 256)
        out += fixed_string(header.check, 512)

    out += body
    return bytes(out)


def fts_header_size(raw: bytes) -> int:
    """UNIQUE_HEADER plus one UNIQUE_HEADER3 per unique header."""
    if len(raw) < FTS_PRIMARY_HEADER_SIZE:
        raise HeaderMismatchError(
            f"FTS data is {len(raw)} bytes, shorter than its {FTS_PRIMARY_HEADER_SIZE} byte header"
        )
    count = struct.unpack_from('<i', raw, FTS_COUNT_OFFSET)[0]
    if count < 0:
        raise HeaderMismatchError(f"FTS unique header count is negative: {count}")
    return FTS_PRIMARY_HEADER_SIZE + count * FTS_SECONDARY_HEADER_SIZE
