"""
Per-polygon geometry: vertex expansion, quad reconstruction, UV fixing and
face normals.
"""

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy

from .constants import POLY_QUAD, VERTEX_PRECISION
from .errors import MalformedMeshError
from .scene import MeshGeometry

UV = Tuple[float, float]
Vec3 = Tuple[float, float, float]

ZERO: Vec3 = (0.0, 0.0, 0.0)

# Positions of the quad corners inside a (a, b, d), (b, c, d) triangle pair
QUAD_CORNERS = (0, 1, 2, 4)
# Entries of the second triangle that repeat the shared edge of the first
SHARED_EDGE = ((3, 1), (5, 2))


@dataclass(frozen=True)
class GeometryVertex:
    idx: int                 # index into the geometry's vertex buffer (uv lookup)
    position: numpy.ndarray  # (3,)


def extract_vertices(geometry: MeshGeometry) -> List[GeometryVertex]:
    """Gets the non-indexed version of the vertices of a geometry.

    Arx has no vertex sharing, so indexed geometry gets expanded: one entry per
    index, each tagged with the buffer index it came from.
    """
    coords = geometry.positions
    count = len(coords)

    if geometry.indices is None:
        # non-indexed geometry, all vertices are unique
        return [GeometryVertex(idx, coords[idx]) for idx in range(count)]

    # indexed geometry, has shared vertices
    vertices = []
    for i, idx in enumerate(geometry.indices):
        idx = int(idx)
        if not 0 <= idx < count:
            raise MalformedMeshError(
                f"Index buffer entry {i} references vertex {idx}, but the mesh only has {count} vertices"
            )
        vertices.append(GeometryVertex(idx, coords[idx]))
    return vertices


def quads_from_vertices(vertices: Sequence[GeometryVertex]) -> List[Tuple[GeometryVertex, ...]]:
    """Rebuild the 4 corners of every quad from its 6 expanded triangle vertices."""
    if len(vertices) % 6 != 0:
        raise MalformedMeshError(
            f"Expected 6 vertices per quad (two triangles), got {len(vertices)} vertices"
        )

    quads = []
    for start in range(0, len(vertices), 6):
        sextet = vertices[start:start + 6]
        for repeated, original in SHARED_EDGE:
            if not numpy.allclose(sextet[repeated].position, sextet[original].position):
                raise MalformedMeshError(
                    f"Triangles at vertex {start} do not share an edge in (a, b, d), (b, c, d) order; "
                    "cannot rebuild a quad"
                )
        quads.append(tuple(sextet[i] for i in QUAD_CORNERS))
    return quads


def round_to_n_decimals(decimals: int, x: float) -> float:
    """Round half up, the way the editor rounded vertex positions."""
    factor = 10 ** decimals
    return math.floor(x * factor + 0.5) / factor


def to_arx_position(position, offset: Vec3, precision: int = VERTEX_PRECISION) -> Vec3:
    """World space (y up) -> Arx space (y down, z flipped, shifted by the scene offset)."""
    x, y, z = (float(c) for c in position)
    return (
        offset[0] + round_to_n_decimals(precision, x),
        offset[1] - round_to_n_decimals(precision, y),
        offset[2] - round_to_n_decimals(precision, z),
    )


def flip_uvs_vertically(uvs: Sequence[UV]) -> List[UV]:
    return [(u, -v) for u, v in uvs]


def _normalize_component(value: float, corrected: bool) -> Tuple[float, bool]:
    if value < 0:
        remainder = math.fmod(value, 1)
        if remainder == 0:
            return 0.0, True
        return 1 + remainder, corrected
    if value > 1:
        return math.fmod(value, 1), corrected
    if corrected:
        return 1.0, corrected
    return value, corrected


def normalize_uvs(uvs: Sequence[UV]) -> List[UV]:
    """Wrap texture coordinates of one polygon into [0, 1].

    Whole negative values are clamped to 0 and mark their axis as corrected;
    every later in-range value on a corrected axis is pushed to 1 so the
    shared edge keeps spanning the full texture.
    """
    corrected_u = False
    corrected_v = False

    result = []
    for u, v in uvs:
        u, corrected_u = _normalize_component(float(u), corrected_u)
        v, corrected_v = _normalize_component(float(v), corrected_v)
        result.append((u, v))
    return result


def _triangle_normal(a: numpy.ndarray, b: numpy.ndarray, c: numpy.ndarray) -> Vec3:
    n = numpy.cross(c - b, a - b)
    length = numpy.linalg.norm(n)
    if length == 0:
        return ZERO
    n = n / length
    return (float(n[0]), float(n[1]), float(n[2]))


def _triangle_area(a: numpy.ndarray, b: numpy.ndarray, c: numpy.ndarray) -> float:
    return float(numpy.linalg.norm(numpy.cross(b - a, c - a)) / 2.0)


def calculate_normals(vertices: Sequence[Vec3], flags: int) -> Tuple[Vec3, Vec3]:
    """Face normal of (a, b, c), plus (d, c, b) for quads.

    The second triangle is taken in (d, c, b) order so that both normals of a
    planar quad point the same way. Degenerate triangles give a zero vector.
    """
    a, b, c, d = (numpy.asarray(v, dtype=numpy.float64) for v in vertices)

    norm = _triangle_normal(a, b, c)
    norm2 = ZERO
    if flags & POLY_QUAD:
        norm2 = _triangle_normal(d, c, b)

    return norm, norm2


def polygon_area(vertices: Sequence[Vec3], flags: int) -> float:
    a, b, c, d = (numpy.asarray(v, dtype=numpy.float64) for v in vertices)

    area = _triangle_area(a, b, c)
    if flags & POLY_QUAD:
        area += _triangle_area(d, c, b)
    return area
