"""Spatial partitioning of polygons into map cells and rooms."""

import math
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .constants import CELL_SIZE, MAP_DEPTH_IN_CELLS, MAP_WIDTH_IN_CELLS, POLY_QUAD, ROOM_COUNT
from .records import ArxPolygon, ArxVertex, Room, RoomPolygon

CellCoords = Tuple[int, int]


def get_cell_coords(vertices: Sequence[ArxVertex], flags: int = POLY_QUAD) -> CellCoords:
    """Cell of the polygon's centre on the XZ plane."""
    used = vertices[:4] if flags & POLY_QUAD else vertices[:3]
    x = sum(v.x for v in used) / len(used)
    z = sum(v.z for v in used) / len(used)
    return math.floor(x / CELL_SIZE), math.floor(z / CELL_SIZE)


def is_inside_map(cell: CellCoords) -> bool:
    cell_x, cell_y = cell
    return 0 <= cell_x < MAP_WIDTH_IN_CELLS and 0 <= cell_y < MAP_DEPTH_IN_CELLS


def bucket_polygons(
    polygons: Sequence[ArxPolygon],
    counters: Optional[Mapping[CellCoords, int]] = None,
) -> Tuple[List[RoomPolygon], Dict[CellCoords, int]]:
    """Assign every polygon its (cellX, cellY, index within cell).

    *counters* holds how many polygons each cell already has; it is copied,
    never modified, and the updated counts are returned alongside the
    memberships so a caller can continue a pass.
    """
    counts: Dict[CellCoords, int] = dict(counters or {})
    memberships: List[RoomPolygon] = []

    for polygon in polygons:
        cell = get_cell_coords(polygon.vertices, polygon.flags)
        idx = counts.get(cell, 0)
        memberships.append(RoomPolygon(cell_x=cell[0], cell_y=cell[1], polygon_idx=idx))
        counts[cell] = idx + 1

    return memberships, counts


def calculate_room_data(polygons: Sequence[ArxPolygon]) -> List[Room]:
    rooms = [Room() for _ in range(ROOM_COUNT)]
    memberships, _ = bucket_polygons(polygons)
    rooms[1].polygons.extend(memberships)
    return rooms
