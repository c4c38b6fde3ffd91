"""Turns a mesh tree snapshot into the FTS, DLF and LLF records of one level."""

import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .bucketing import calculate_room_data, get_cell_coords, is_inside_map
from .constants import (
    DEFAULT_LEVEL_IDX,
    DEFAULT_OFFSET,
    DEFAULT_PLAYER_ORIENTATION,
    DEFAULT_PLAYER_POSITION,
    DEFAULT_ROOM_DISTANCES,
    GENERATOR_ID,
    MAP_DEPTH_IN_CELLS,
    MAP_WIDTH_IN_CELLS,
    POLY_QUAD,
    VERTEX_PRECISION,
)
from .errors import MalformedMeshError
from .geometry import (
    calculate_normals,
    extract_vertices,
    flip_uvs_vertically,
    normalize_uvs,
    polygon_area,
    quads_from_vertices,
    to_arx_position,
)
from .records import (
    ArxColor,
    ArxPolygon,
    ArxVertex,
    Cell,
    DlfRecord,
    FtsRecord,
    LevelData,
    LlfRecord,
    RoomDistance,
    TextureContainer,
)
from .scene import MeshGeometry, MeshNode, flatten_transforms, iter_geometries

Vec3 = Tuple[float, float, float]


@dataclass(frozen=True)
class CompileOptions:
    offset: Vec3 = DEFAULT_OFFSET
    player_position: Vec3 = DEFAULT_PLAYER_POSITION
    player_orientation: Vec3 = DEFAULT_PLAYER_ORIENTATION
    vertex_precision: int = VERTEX_PRECISION
    generator_id: str = GENERATOR_ID


class TextureRegistry:
    """Hands out one texture container id per distinct file name, starting at 1."""

    def __init__(self):
        self._ids: Dict[str, int] = {}

    def id_for(self, filename: str) -> int:
        if filename not in self._ids:
            self._ids[filename] = len(self._ids) + 1
        return self._ids[filename]

    def containers(self) -> List[TextureContainer]:
        return [TextureContainer(id=idx, filename=name) for name, idx in self._ids.items()]


def polygons_from_geometry(geometry: MeshGeometry, texture_id: int, options: CompileOptions) -> List[ArxPolygon]:
    """Convert a world-space geometry into engine quads."""
    flags = POLY_QUAD
    polygons = []

    for corners in quads_from_vertices(extract_vertices(geometry)):
        positions = [to_arx_position(c.position, options.offset, options.vertex_precision) for c in corners]
        uvs = [tuple(geometry.uvs[c.idx]) for c in corners]
        uvs = normalize_uvs(flip_uvs_vertically(uvs))

        vertices = tuple(
            ArxVertex(x=p[0], y=p[1], z=p[2], u=uv[0], v=uv[1])
            for p, uv in zip(positions, uvs)
        )
        norm, norm2 = calculate_normals(positions, flags)

        polygons.append(ArxPolygon(
            vertices=vertices,
            norm=norm,
            norm2=norm2,
            texture_container_id=texture_id,
            flags=flags,
            transval=0.0,
            area=polygon_area(positions, flags),
            room=1,
        ))
    return polygons


def _check_inside_map(polygons: List[ArxPolygon]) -> None:
    for i, polygon in enumerate(polygons):
        cell = get_cell_coords(polygon.vertices, polygon.flags)
        if not is_inside_map(cell):
            raise MalformedMeshError(
                f"Polygon {i} falls into cell {cell}, outside of the "
                f"{MAP_WIDTH_IN_CELLS}x{MAP_DEPTH_IN_CELLS} map"
            )


def to_level_data(
    root: Optional[MeshNode],
    level_idx: int = DEFAULT_LEVEL_IDX,
    now: Optional[int] = None,
    options: Optional[CompileOptions] = None,
) -> LevelData:
    """Build the three level records for the scene under *root*.

    *now* is the UNIX timestamp written into the DLF and LLF headers; the
    wall clock is only read when it is omitted.
    """
    if options is None:
        options = CompileOptions()
    if now is None:
        now = int(time.time())

    textures = TextureRegistry()
    polygons: List[ArxPolygon] = []
    if root is not None:
        for geometry in iter_geometries(flatten_transforms(root)):
            texture_id = textures.id_for(geometry.texture)
            polygons.extend(polygons_from_geometry(geometry, texture_id, options))

    _check_inside_map(polygons)

    dlf = DlfRecord(
        last_user=options.generator_id,
        time=now,
        player_position=options.player_position,
        player_orientation=options.player_orientation,
        number_of_background_polygons=len(polygons),
        level_idx=level_idx,
    )

    fts = FtsRecord(
        level_idx=level_idx,
        scene_position=options.offset,
        polygons=polygons,
        texture_containers=textures.containers(),
        cells=[Cell() for _ in range(MAP_WIDTH_IN_CELLS * MAP_DEPTH_IN_CELLS)],
        rooms=calculate_room_data(polygons),
        room_distances=[RoomDistance(d, start, end) for d, start, end in DEFAULT_ROOM_DISTANCES],
    )

    llf = LlfRecord(
        last_user=options.generator_id,
        time=now,
        number_of_background_polygons=len(polygons),
        colors=[ArxColor(255, 255, 255, 1.0) for polygon in polygons for _ in polygon.vertices],
    )

    return LevelData(fts=fts, dlf=dlf, llf=llf)
