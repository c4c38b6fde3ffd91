"""Loads a glTF/GLB scene into a MeshNode tree."""

import os
from typing import Dict, List, Optional, Set

import numpy
import pygltflib

from .constants import DEFAULT_TEXTURE
from .errors import MalformedMeshError
from .scene import MeshGeometry, MeshNode

COMPONENT_DTYPES = {
    5120: numpy.int8,
    5121: numpy.uint8,
    5122: numpy.int16,
    5123: numpy.uint16,
    5125: numpy.uint32,
    5126: numpy.float32
}
TYPE_COMPONENTS = {
    'SCALAR': 1,
    'VEC2': 2,
    'VEC3': 3,
    'VEC4': 4
}
MODE_TRIANGLES = 4


def get_accessor_data(gltf: pygltflib.GLTF2, blob: bytes, accessor_id: int) -> numpy.ndarray:
    accessor = gltf.accessors[accessor_id]
    buffer_view = gltf.bufferViews[accessor.bufferView]
    offset = (buffer_view.byteOffset or 0) + (accessor.byteOffset or 0)
    dtype = numpy.dtype(COMPONENT_DTYPES[accessor.componentType])
    num_components = TYPE_COMPONENTS[accessor.type]

    packed_stride = dtype.itemsize * num_components
    stride = buffer_view.byteStride or packed_stride
    if stride != packed_stride:
        data = numpy.ndarray(
            shape=(accessor.count, num_components),
            dtype=dtype,
            buffer=blob,
            offset=offset,
            strides=(stride, dtype.itemsize),
        ).copy()
    else:
        data = numpy.frombuffer(blob, dtype=dtype, count=accessor.count * num_components, offset=offset)
        data = data.reshape(accessor.count, num_components)

    if accessor.normalized and dtype.kind in 'iu':
        # integer storage of a [0, 1] (or [-1, 1] for signed) float
        data = numpy.maximum(data / float(numpy.iinfo(dtype).max), -1.0)
    return data if num_components > 1 else data.reshape(-1)


def _node_matrix(node: pygltflib.Node) -> Optional[numpy.ndarray]:
    if node.matrix:
        # glTF stores column-major; transpose to row-major
        return numpy.array(node.matrix, dtype=numpy.float64).reshape(4, 4).T
    return None


def resolve_texture_name(gltf: pygltflib.GLTF2, material_index: Optional[int]) -> str:
    """File name of the base colour image of a material, or the default texture."""
    if material_index is None or not gltf.materials or material_index >= len(gltf.materials):
        return DEFAULT_TEXTURE
    pbr = gltf.materials[material_index].pbrMetallicRoughness
    base_tex = pbr.baseColorTexture if pbr is not None else None
    if base_tex is None or base_tex.index is None:
        return DEFAULT_TEXTURE

    textures = gltf.textures or []
    if not 0 <= base_tex.index < len(textures):
        return DEFAULT_TEXTURE
    source = textures[base_tex.index].source
    images = gltf.images or []
    if source is None or not 0 <= source < len(images):
        return DEFAULT_TEXTURE

    image = images[source]
    if image.uri and not image.uri.startswith("data:"):
        return os.path.basename(image.uri)
    if image.name and image.name.strip():
        return image.name.strip()
    return DEFAULT_TEXTURE


def _mesh_geometries(gltf: pygltflib.GLTF2, blob: bytes, mesh_index: int) -> List[MeshGeometry]:
    geometries = []
    for primitive in gltf.meshes[mesh_index].primitives:
        if primitive.mode is not None and primitive.mode != MODE_TRIANGLES:
            raise MalformedMeshError(
                f"Mesh {mesh_index} has a primitive in mode {primitive.mode}; only triangles are supported"
            )
        positions = get_accessor_data(gltf, blob, primitive.attributes.POSITION)
        if primitive.attributes.TEXCOORD_0 is not None:
            uvs = get_accessor_data(gltf, blob, primitive.attributes.TEXCOORD_0)
        else:
            uvs = numpy.zeros((len(positions), 2), dtype=numpy.float32)
        indices = get_accessor_data(gltf, blob, primitive.indices) if primitive.indices is not None else None

        geometries.append(MeshGeometry(
            positions=positions,
            uvs=uvs,
            indices=indices,
            texture=resolve_texture_name(gltf, primitive.material),
        ))
    return geometries


def scene_from_gltf(gltf: pygltflib.GLTF2, blob: bytes) -> MeshNode:
    """Build an owned MeshNode tree from the default scene of *gltf*."""
    nodes = gltf.nodes or []

    if gltf.scenes:
        scene = gltf.scenes[gltf.scene or 0]
        root_ids = list(scene.nodes or [])
    else:
        children: Set[int] = {c for node in nodes for c in (node.children or [])}
        root_ids = [i for i in range(len(nodes)) if i not in children]

    visited: Set[int] = set()
    cache: Dict[int, List[MeshGeometry]] = {}

    def build(node_id: int) -> MeshNode:
        if node_id in visited:
            raise ValueError(f"glTF node {node_id} is referenced more than once; the node graph must be a tree")
        visited.add(node_id)
        node = nodes[node_id]

        geometries: List[MeshGeometry] = []
        if node.mesh is not None:
            if node.mesh not in cache:
                cache[node.mesh] = _mesh_geometries(gltf, blob, node.mesh)
            geometries = cache[node.mesh]

        return MeshNode(
            name=node.name or f"node{node_id}",
            translation=tuple(node.translation or (0.0, 0.0, 0.0)),
            rotation=tuple(node.rotation or (0.0, 0.0, 0.0, 1.0)),
            scale=tuple(node.scale or (1.0, 1.0, 1.0)),
            matrix=_node_matrix(node),
            geometries=geometries,
            children=[build(c) for c in (node.children or [])],
        )

    return MeshNode(name="scene", children=[build(i) for i in root_ids])


def load_gltf_scene(gltf_path: str, bin_path: Optional[str] = None) -> MeshNode:
    if not os.path.isfile(gltf_path):
        raise FileNotFoundError(f"Input glTF/GLB not found: {gltf_path}")
    if gltf_path.lower().endswith('.gltf') and not bin_path:
        raise ValueError("A .bin file is required when using a .gltf file (pass with --bin).")

    gltf = pygltflib.GLTF2.load(gltf_path)

    blob = None
    if gltf_path.lower().endswith('.glb'):
        blob = gltf.binary_blob()
    elif bin_path and os.path.exists(bin_path):
        with open(bin_path, 'rb') as f:
            blob = f.read()

    if blob is None:
        raise ValueError("Could not load binary data.")
    if not gltf.meshes:
        raise ValueError("No meshes found in file.")

    return scene_from_gltf(gltf, blob)
