"""Logical level records, one set per compile.

These are the in-memory shapes of the FTS, DLF and LLF files before they are
encoded. Positions are engine space (y pointing down, offset by the scene
origin).
"""

from dataclasses import dataclass, field
from typing import List, Tuple

from .constants import POLY_QUAD

Vec3 = Tuple[float, float, float]
Angle = Tuple[float, float, float]  # a, b, g
RGB = Tuple[float, float, float]    # 0..1 per channel


@dataclass(frozen=True)
class ArxVertex:
    x: float
    y: float
    z: float
    u: float = 0.0
    v: float = 0.0

    @property
    def position(self) -> Vec3:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class ArxPolygon:
    vertices: Tuple[ArxVertex, ArxVertex, ArxVertex, ArxVertex]
    norm: Vec3
    norm2: Vec3
    texture_container_id: int
    flags: int = POLY_QUAD
    transval: float = 0.0
    area: float = 0.0
    room: int = 1

    @property
    def is_quad(self) -> bool:
        return bool(self.flags & POLY_QUAD)


@dataclass(frozen=True)
class TextureContainer:
    id: int
    filename: str


@dataclass(frozen=True)
class RoomPolygon:
    cell_x: int
    cell_y: int
    polygon_idx: int


@dataclass
class Room:
    portals: List[int] = field(default_factory=list)
    polygons: List[RoomPolygon] = field(default_factory=list)


@dataclass(frozen=True)
class RoomDistance:
    distance: float
    start_position: Vec3
    end_position: Vec3


@dataclass
class Anchor:
    position: Vec3
    radius: float
    height: float
    linked_anchors: List[int] = field(default_factory=list)
    flags: int = 0


@dataclass
class Cell:
    anchors: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class UniqueHeader:
    path: str
    check: bytes = b""


@dataclass(frozen=True)
class InteractiveObject:
    name: str
    position: Vec3
    orientation: Angle = (0.0, 0.0, 0.0)
    identifier: int = 0
    flags: int = 0


@dataclass(frozen=True)
class Fog:
    position: Vec3
    color: RGB
    size: float
    special: int = 0
    scale: float = 0.0
    move: Vec3 = (0.0, 0.0, 0.0)
    orientation: Angle = (0.0, 0.0, 0.0)
    speed: float = 0.0
    rotate_speed: float = 0.0
    to_live: int = 0
    blend: int = 0
    frequency: float = 0.0


@dataclass(frozen=True)
class PathWay:
    position: Vec3
    flag: int = 0
    time: int = 0


@dataclass
class Path:
    name: str
    position: Vec3
    pathways: List[PathWay] = field(default_factory=list)
    flags: int = 0
    color: RGB = (0.0, 0.0, 0.0)
    far_clip: float = 0.0
    reverb: float = 0.0
    ambiance_max_volume: float = 0.0
    height: int = 0
    ambiance: str = ""


@dataclass(frozen=True)
class Light:
    position: Vec3
    color: RGB
    fall_start: float
    fall_end: float
    intensity: float
    flags: int = 0


@dataclass(frozen=True)
class ArxColor:
    r: int
    g: int
    b: int
    a: float = 1.0


@dataclass
class DlfRecord:
    last_user: str
    time: int
    player_position: Vec3
    player_orientation: Angle
    number_of_background_polygons: int
    level_idx: int
    interactive_objects: List[InteractiveObject] = field(default_factory=list)
    fogs: List[Fog] = field(default_factory=list)
    paths: List[Path] = field(default_factory=list)
    zones: List[Path] = field(default_factory=list)


@dataclass
class FtsRecord:
    level_idx: int
    scene_position: Vec3
    polygons: List[ArxPolygon]
    texture_containers: List[TextureContainer]
    cells: List[Cell]
    rooms: List[Room]
    room_distances: List[RoomDistance]
    anchors: List[Anchor] = field(default_factory=list)
    unique_headers: List[UniqueHeader] = field(default_factory=list)
    player_position: Vec3 = (0.0, 0.0, 0.0)


@dataclass
class LlfRecord:
    last_user: str
    time: int
    number_of_background_polygons: int
    colors: List[ArxColor]
    lights: List[Light] = field(default_factory=list)


@dataclass
class LevelData:
    fts: FtsRecord
    dlf: DlfRecord
    llf: LlfRecord
