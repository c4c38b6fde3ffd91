"""
Mesh tree snapshot and transform flattening.

A scene is an owned, acyclic tree of MeshNode objects. Each node carries a
local TRS transform (or an explicit matrix, as glTF allows) and any number of
MeshGeometry leaves. flatten_transforms() bakes every transform into the
geometry so that all positions end up in one shared world frame.
"""

from dataclasses import dataclass, field, replace
from typing import Iterator, List, Optional, Tuple

import numpy

from .constants import DEFAULT_TEXTURE

Vec3 = Tuple[float, float, float]
Quat = Tuple[float, float, float, float]

IDENTITY_TRANSLATION: Vec3 = (0.0, 0.0, 0.0)
IDENTITY_ROTATION: Quat = (0.0, 0.0, 0.0, 1.0)  # x, y, z, w
IDENTITY_SCALE: Vec3 = (1.0, 1.0, 1.0)


@dataclass
class MeshGeometry:
    positions: numpy.ndarray                 # (N, 3)
    uvs: numpy.ndarray                       # (N, 2), indexed by buffer position
    indices: Optional[numpy.ndarray] = None  # (M,) or None for non-indexed data
    texture: str = DEFAULT_TEXTURE

    def __post_init__(self):
        self.positions = numpy.asarray(self.positions, dtype=numpy.float64).reshape(-1, 3)
        self.uvs = numpy.asarray(self.uvs, dtype=numpy.float64).reshape(-1, 2)
        if self.indices is not None:
            self.indices = numpy.asarray(self.indices, dtype=numpy.int64).reshape(-1)
        if len(self.uvs) != len(self.positions):
            raise ValueError(
                f"UV count ({len(self.uvs)}) does not match vertex count ({len(self.positions)})"
            )

    def transformed(self, world: numpy.ndarray) -> "MeshGeometry":
        """Return a copy with positions moved by the 4x4 row-major *world* matrix."""
        R = world[:3, :3]
        t = world[:3, 3]
        return MeshGeometry(
            positions=self.positions @ R.T + t,
            uvs=self.uvs.copy(),
            indices=None if self.indices is None else self.indices.copy(),
            texture=self.texture,
        )


@dataclass
class MeshNode:
    name: str = ""
    translation: Vec3 = IDENTITY_TRANSLATION
    rotation: Quat = IDENTITY_ROTATION
    scale: Vec3 = IDENTITY_SCALE
    matrix: Optional[numpy.ndarray] = None
    geometries: List[MeshGeometry] = field(default_factory=list)
    children: List["MeshNode"] = field(default_factory=list)


def node_local_matrix(node: MeshNode) -> numpy.ndarray:
    """Build a 4x4 row-major matrix from a node's TRS or matrix."""
    if node.matrix is not None:
        return numpy.array(node.matrix, dtype=numpy.float64).reshape(4, 4)

    t = numpy.array(node.translation, dtype=numpy.float64)
    s = numpy.array(node.scale, dtype=numpy.float64)
    x, y, z, w = (float(c) for c in node.rotation)

    xx, yy, zz = x*x, y*y, z*z
    xy, xz, yz = x*y, x*z, y*z
    wx, wy, wz = w*x, w*y, w*z

    rot = numpy.array([
        [1.0 - 2.0*(yy + zz),     2.0*(xy - wz),         2.0*(xz + wy),       0.0],
        [    2.0*(xy + wz),   1.0 - 2.0*(xx + zz),       2.0*(yz - wx),       0.0],
        [    2.0*(xz - wy),       2.0*(yz + wx),     1.0 - 2.0*(xx + yy),     0.0],
        [0.0,                   0.0,                   0.0,                   1.0]
    ], dtype=numpy.float64)

    smat = numpy.diag([s[0], s[1], s[2], 1.0])
    m = rot @ smat
    m[0:3, 3] = t
    return m


def flatten_transforms(node: MeshNode, parent: Optional[numpy.ndarray] = None) -> MeshNode:
    """Return a copy of *node* with every transform baked into its geometry.

    The parent's world matrix is composed with each node's local matrix on the
    way down; every node of the result has an identity transform. The input
    tree is left untouched, and flattening a flattened tree changes nothing.
    """
    world = node_local_matrix(node)
    if parent is not None:
        world = parent @ world

    return replace(
        node,
        translation=IDENTITY_TRANSLATION,
        rotation=IDENTITY_ROTATION,
        scale=IDENTITY_SCALE,
        matrix=None,
        geometries=[g.transformed(world) for g in node.geometries],
        children=[flatten_transforms(child, world) for child in node.children],
    )


def iter_geometries(node: MeshNode) -> Iterator[MeshGeometry]:
    """Yield every geometry of the tree, parents before children."""
    yield from node.geometries
    for child in node.children:
        yield from iter_geometries(child)


def make_ground_plane(at: Vec3 = (0.0, 0.0, 0.0), size: float = 100.0,
                      texture: str = DEFAULT_TEXTURE, name: str = "ground") -> MeshNode:
    """A single-segment plane lying in XZ, facing +Y, centred on *at*.

    Same vertex, uv and index layout as a 1x1 segment plane generated in XY
    and rotated -90 degrees around X.
    """
    half = size / 2.0
    positions = [
        (-half, 0.0, -half),
        (half, 0.0, -half),
        (-half, 0.0, half),
        (half, 0.0, half),
    ]
    uvs = [(0.0, 1.0), (1.0, 1.0), (0.0, 0.0), (1.0, 0.0)]
    indices = [0, 2, 1, 2, 3, 1]

    return MeshNode(
        name=name,
        translation=tuple(float(c) for c in at),
        geometries=[MeshGeometry(positions, uvs, indices, texture)],
    )
