import contextlib
import importlib.util
import io
import os
import tempfile
import unittest

import numpy
import pygltflib

from levelcompiler.assembler import to_level_data
from levelcompiler.cli import main, parse_args, write_level
from levelcompiler.constants import DEFAULT_TEXTURE
from levelcompiler.errors import MalformedMeshError
from levelcompiler.gltf_loader import get_accessor_data, load_gltf_scene, resolve_texture_name, scene_from_gltf

NOW = 1700000000
HAS_DCLIMPLODE = importlib.util.find_spec("dclimplode") is not None

POSITIONS = numpy.array([
    (-50.0, 0.0, -50.0),
    (50.0, 0.0, -50.0),
    (-50.0, 0.0, 50.0),
    (50.0, 0.0, 50.0),
], dtype=numpy.float32)
UVS = numpy.array([(0.0, 1.0), (1.0, 1.0), (0.0, 0.0), (1.0, 0.0)], dtype=numpy.float32)
INDICES = numpy.array([0, 2, 1, 2, 3, 1], dtype=numpy.uint16)


def _plane_gltf(mode=pygltflib.TRIANGLES, image_uri="textures/wall.png"):
    """A parent node shifted by 100 on X holding one child with a plane mesh."""
    pos_bytes = POSITIONS.tobytes()
    uv_bytes = UVS.tobytes()
    idx_bytes = INDICES.tobytes()
    blob = pos_bytes + uv_bytes + idx_bytes

    gltf = pygltflib.GLTF2(
        scene=0,
        scenes=[pygltflib.Scene(nodes=[0])],
        nodes=[
            pygltflib.Node(name="parent", translation=[100.0, 0.0, 0.0], children=[1]),
            pygltflib.Node(name="floor", mesh=0),
        ],
        meshes=[pygltflib.Mesh(primitives=[pygltflib.Primitive(
            attributes=pygltflib.Attributes(POSITION=0, TEXCOORD_0=1),
            indices=2,
            material=0,
            mode=mode,
        )])],
        materials=[pygltflib.Material(
            pbrMetallicRoughness=pygltflib.PbrMetallicRoughness(
                baseColorTexture=pygltflib.TextureInfo(index=0),
            ),
        )],
        textures=[pygltflib.Texture(source=0)],
        images=[pygltflib.Image(uri=image_uri)],
        accessors=[
            pygltflib.Accessor(bufferView=0, componentType=pygltflib.FLOAT, count=4, type=pygltflib.VEC3),
            pygltflib.Accessor(bufferView=1, componentType=pygltflib.FLOAT, count=4, type=pygltflib.VEC2),
            pygltflib.Accessor(bufferView=2, componentType=pygltflib.UNSIGNED_SHORT, count=6, type=pygltflib.SCALAR),
        ],
        bufferViews=[
            pygltflib.BufferView(buffer=0, byteOffset=0, byteLength=len(pos_bytes)),
            pygltflib.BufferView(buffer=0, byteOffset=len(pos_bytes), byteLength=len(uv_bytes)),
            pygltflib.BufferView(buffer=0, byteOffset=len(pos_bytes) + len(uv_bytes), byteLength=len(idx_bytes)),
        ],
        buffers=[pygltflib.Buffer(byteLength=len(blob))],
    )
    return gltf, blob


class TestAccessors(unittest.TestCase):
    def test_packed_accessors(self) -> None:
        gltf, blob = _plane_gltf()
        numpy.testing.assert_array_equal(get_accessor_data(gltf, blob, 0), POSITIONS)
        numpy.testing.assert_array_equal(get_accessor_data(gltf, blob, 1), UVS)
        numpy.testing.assert_array_equal(get_accessor_data(gltf, blob, 2), INDICES)

    def test_interleaved_accessors(self) -> None:
        interleaved = numpy.hstack([POSITIONS, UVS]).astype(numpy.float32)
        blob = interleaved.tobytes()
        gltf = pygltflib.GLTF2(
            accessors=[
                pygltflib.Accessor(bufferView=0, byteOffset=0, componentType=pygltflib.FLOAT, count=4, type=pygltflib.VEC3),
                pygltflib.Accessor(bufferView=0, byteOffset=12, componentType=pygltflib.FLOAT, count=4, type=pygltflib.VEC2),
            ],
            bufferViews=[pygltflib.BufferView(buffer=0, byteOffset=0, byteLength=len(blob), byteStride=20)],
            buffers=[pygltflib.Buffer(byteLength=len(blob))],
        )

        numpy.testing.assert_array_equal(get_accessor_data(gltf, blob, 0), POSITIONS)
        numpy.testing.assert_array_equal(get_accessor_data(gltf, blob, 1), UVS)

    def test_normalized_integer_uvs(self) -> None:
        packed = numpy.round(UVS * 65535).astype(numpy.uint16)
        blob = packed.tobytes()
        gltf = pygltflib.GLTF2(
            accessors=[pygltflib.Accessor(
                bufferView=0, componentType=pygltflib.UNSIGNED_SHORT, count=4,
                type=pygltflib.VEC2, normalized=True,
            )],
            bufferViews=[pygltflib.BufferView(buffer=0, byteOffset=0, byteLength=len(blob))],
            buffers=[pygltflib.Buffer(byteLength=len(blob))],
        )

        numpy.testing.assert_allclose(get_accessor_data(gltf, blob, 0), UVS)

    def test_normalized_uvs_reach_level(self) -> None:
        gltf, _ = _plane_gltf()
        packed = numpy.round(UVS * 255).astype(numpy.uint8).tobytes()
        blob = POSITIONS.tobytes() + packed + INDICES.tobytes()
        gltf.accessors[1].componentType = pygltflib.UNSIGNED_BYTE
        gltf.accessors[1].normalized = True
        gltf.bufferViews[1].byteLength = len(packed)
        gltf.bufferViews[2].byteOffset = len(POSITIONS.tobytes()) + len(packed)
        gltf.buffers[0].byteLength = len(blob)

        plain = to_level_data(scene_from_gltf(*_plane_gltf()), now=NOW)
        level = to_level_data(scene_from_gltf(gltf, blob), now=NOW)

        self.assertEqual(
            [(v.u, v.v) for v in level.fts.polygons[0].vertices],
            [(v.u, v.v) for v in plain.fts.polygons[0].vertices],
        )


class TestTextureNames(unittest.TestCase):
    def test_image_uri_basename(self) -> None:
        gltf, _ = _plane_gltf()
        self.assertEqual(resolve_texture_name(gltf, 0), "wall.png")

    def test_missing_material_uses_default(self) -> None:
        gltf, _ = _plane_gltf()
        self.assertEqual(resolve_texture_name(gltf, None), DEFAULT_TEXTURE)
        self.assertEqual(resolve_texture_name(gltf, 5), DEFAULT_TEXTURE)

    def test_embedded_image_uses_name(self) -> None:
        gltf, _ = _plane_gltf(image_uri="data:image/png;base64,AAAA")
        gltf.images[0].name = "floor_tiles.jpg"
        self.assertEqual(resolve_texture_name(gltf, 0), "floor_tiles.jpg")


class TestSceneFromGltf(unittest.TestCase):
    def test_hierarchy(self) -> None:
        gltf, blob = _plane_gltf()
        root = scene_from_gltf(gltf, blob)

        parent = root.children[0]
        self.assertEqual(parent.name, "parent")
        self.assertEqual(parent.translation, (100.0, 0.0, 0.0))

        floor = parent.children[0]
        self.assertEqual(floor.name, "floor")
        self.assertEqual(len(floor.geometries), 1)
        geometry = floor.geometries[0]
        self.assertEqual(geometry.texture, "wall.png")
        self.assertEqual(list(geometry.indices), [0, 2, 1, 2, 3, 1])

    def test_parent_transform_reaches_level(self) -> None:
        gltf, blob = _plane_gltf()
        level = to_level_data(scene_from_gltf(gltf, blob), now=NOW)

        self.assertEqual(len(level.fts.polygons), 1)
        self.assertEqual(level.fts.texture_containers[0].filename, "wall.png")
        self.assertEqual(level.fts.rooms[1].polygons[0].cell_x, 61)
        self.assertEqual(level.fts.rooms[1].polygons[0].cell_y, 60)

    def test_non_triangle_primitive(self) -> None:
        gltf, blob = _plane_gltf(mode=pygltflib.LINES)
        with self.assertRaises(MalformedMeshError):
            scene_from_gltf(gltf, blob)

    def test_shared_node_rejected(self) -> None:
        gltf, blob = _plane_gltf()
        gltf.scenes[0].nodes = [0, 1]
        with self.assertRaises(ValueError):
            scene_from_gltf(gltf, blob)


class TestLoadFiles(unittest.TestCase):
    def test_missing_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_gltf_scene("/nonexistent/level.glb")

    def test_gltf_without_bin(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "level.gltf")
            with open(path, "w") as f:
                f.write("{}")
            with self.assertRaises(ValueError):
                load_gltf_scene(path)

    def test_glb_round_trip(self) -> None:
        gltf, blob = _plane_gltf()
        gltf.set_binary_blob(blob)
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "level.glb")
            gltf.save_binary(path)
            root = load_gltf_scene(path)

        geometry = root.children[0].children[0].geometries[0]
        numpy.testing.assert_array_equal(geometry.positions, POSITIONS.astype(numpy.float64))


class TestCli(unittest.TestCase):
    def test_parse_args(self) -> None:
        args = parse_args(["scene.glb", "out", "--level", "3", "--offset", "1", "2", "3"])
        self.assertEqual(args.input, "scene.glb")
        self.assertEqual(args.output, "out")
        self.assertEqual(args.level, 3)
        self.assertEqual(args.offset, [1.0, 2.0, 3.0])
        self.assertFalse(args.ground_plane)

    def test_input_required_without_ground_plane(self) -> None:
        with self.assertRaises(SystemExit):
            parse_args(["out"])

    def test_help_states_quad_layout(self) -> None:
        out = io.StringIO()
        with contextlib.redirect_stdout(out), self.assertRaises(SystemExit):
            parse_args(["--help"])
        self.assertIn("(a, b, d), (b, c, d)", " ".join(out.getvalue().split()))

    def test_write_level(self) -> None:
        messages = []
        with tempfile.TemporaryDirectory() as tmp:
            write_level({"graph/levels/level1/level1.dlf": b"abc"}, tmp, log=messages.append)
            with open(os.path.join(tmp, "graph", "levels", "level1", "level1.dlf"), "rb") as f:
                self.assertEqual(f.read(), b"abc")
        self.assertEqual(len(messages), 1)

    @unittest.skipUnless(HAS_DCLIMPLODE, "dclimplode is not installed")
    def test_ground_plane_command(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            main(["--ground-plane", tmp, "--level", "2"])
            for relative in ("game/graph/levels/level2/fast.fts",
                             "graph/levels/level2/level2.dlf",
                             "graph/levels/level2/level2.llf"):
                self.assertTrue(os.path.isfile(os.path.join(tmp, *relative.split("/"))))


if __name__ == "__main__":
    unittest.main()
