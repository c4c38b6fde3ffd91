import struct
import unittest

from levelcompiler.assembler import to_level_data
from levelcompiler.binio import check_size, fixed_string
from levelcompiler.constants import (
    DLF_FOG_SIZE,
    DLF_HEADER_SIZE,
    DLF_SCENE_SIZE,
    FTS_POLYGON_SIZE,
    LLF_LIGHT_SIZE,
    LLF_RAW_HEADER_SIZE,
    MAP_DEPTH_IN_CELLS,
    MAP_WIDTH_IN_CELLS,
)
from levelcompiler.dlf import encode_dlf
from levelcompiler.errors import HeaderMismatchError
from levelcompiler.fts import encode_fts, fts_header_size
from levelcompiler.llf import encode_llf
from levelcompiler.records import Fog, InteractiveObject, Light, Path, PathWay, UniqueHeader
from levelcompiler.scene import MeshNode, make_ground_plane

NOW = 1700000000


class TestFixedString(unittest.TestCase):
    def test_pads_with_nul(self) -> None:
        self.assertEqual(fixed_string("abc", 6), b"abc\x00\x00\x00")

    def test_too_long(self) -> None:
        with self.assertRaises(ValueError):
            fixed_string("x" * 17, 16)


class TestCheckSize(unittest.TestCase):
    def test_matching_size_passes_through(self) -> None:
        self.assertEqual(check_size(b"abcd", 4, "test"), b"abcd")

    def test_mismatch_raises_value_error(self) -> None:
        with self.assertRaises(ValueError):
            check_size(b"abc", 4, "test")


class TestFtsEncoder(unittest.TestCase):
    def test_empty_scene_size(self) -> None:
        fts = to_level_data(MeshNode(), now=NOW).fts
        raw = encode_fts(fts)

        cells = MAP_WIDTH_IN_CELLS * MAP_DEPTH_IN_CELLS
        body = 56 + cells * 8 + 2 * 32 + 4 * 28
        self.assertEqual(len(raw), 280 + body)
        self.assertEqual(fts_header_size(raw), 280)
        # uncompressedsize in the unique header
        self.assertEqual(struct.unpack_from("<i", raw, 264)[0], body)

    def test_polygon_and_texture_bytes(self) -> None:
        fts = to_level_data(make_ground_plane(), now=NOW).fts
        empty = encode_fts(to_level_data(MeshNode(), now=NOW).fts)
        raw = encode_fts(fts)

        self.assertEqual(len(raw) - len(empty), FTS_POLYGON_SIZE + 264 + 8)
        self.assertIn(b"GRAPH\\OBJ3D\\TEXTURES\\l1_prison_[stone]_ground19.jpg", raw)

    def test_scene_header_counts(self) -> None:
        raw = encode_fts(to_level_data(make_ground_plane(), now=NOW).fts)
        version, sizex, sizez, nb_textures, nb_polys, nb_anchors = struct.unpack_from("<fiiiii", raw, 280)
        scene_pos = struct.unpack_from("<fff", raw, 280 + 36)
        nb_portals, nb_rooms = struct.unpack_from("<ii", raw, 280 + 48)

        self.assertAlmostEqual(version, 0.141, places=5)
        self.assertEqual((sizex, sizez), (160, 160))
        self.assertEqual((nb_textures, nb_polys, nb_anchors), (1, 1, 0))
        self.assertEqual(scene_pos, (6000.0, 0.0, 6000.0))
        self.assertEqual((nb_portals, nb_rooms), (0, 1))

    def test_unique_headers_extend_header(self) -> None:
        fts = to_level_data(MeshNode(), now=NOW).fts
        fts.unique_headers = [UniqueHeader("a.fts"), UniqueHeader("b.fts", b"\x01" * 512)]
        raw = encode_fts(fts)

        self.assertEqual(fts_header_size(raw), 280 + 2 * 768)
        self.assertEqual(raw[280 + 768 + 256:280 + 768 + 256 + 512], b"\x01" * 512)

    def test_room_distance_count_checked(self) -> None:
        fts = to_level_data(MeshNode(), now=NOW).fts
        fts.room_distances = fts.room_distances[:3]
        with self.assertRaises(ValueError):
            encode_fts(fts)

    def test_short_buffer_has_no_header(self) -> None:
        with self.assertRaises(HeaderMismatchError):
            fts_header_size(b"\x00" * 100)


class TestDlfEncoder(unittest.TestCase):
    def test_header_fields(self) -> None:
        dlf = to_level_data(make_ground_plane(), now=NOW).dlf
        raw = encode_dlf(dlf)

        self.assertEqual(len(raw), DLF_HEADER_SIZE + DLF_SCENE_SIZE)
        self.assertEqual(raw[4:14], b"DANAE_FILE")
        self.assertEqual(struct.unpack_from("<i", raw, 276)[0], NOW)
        self.assertEqual(struct.unpack_from("<fff", raw, 280), (0.0, -180.0, 0.0))
        # nb_bkgpolys follows Bpad, nb_lights and nb_fogs
        self.assertEqual(struct.unpack_from("<i", raw, 328 + 1024 + 8)[0], 1)
        self.assertTrue(raw[DLF_HEADER_SIZE:].startswith(b"Graph\\Levels\\Level1\\"))

    def test_objects_fogs_and_paths(self) -> None:
        dlf = to_level_data(MeshNode(), now=NOW).dlf
        dlf.interactive_objects = [InteractiveObject("GRAPH\\OBJ3D\\INTERACTIVE\\ITEMS\\KEY.TEO", (1, 2, 3))]
        dlf.fogs = [Fog((0, 0, 0), (1, 1, 1), 100)]
        dlf.paths = [Path("path", (0, 0, 0), [PathWay((0, 0, 0)), PathWay((10, 0, 0), time=500)])]
        dlf.zones = [Path("zone", (0, 0, 0), height=200)]
        raw = encode_dlf(dlf)

        self.assertEqual(len(raw), DLF_HEADER_SIZE + 640 + 664 + 592 + (608 + 2 * 68) + 608)
        self.assertEqual(struct.unpack_from("<i", raw, 308)[0], 1)   # nb_inter
        self.assertEqual(struct.unpack_from("<i", raw, 320)[0], 1)   # nb_zones
        self.assertEqual(struct.unpack_from("<i", raw, 1376 - 4)[0], 2)  # nb_paths

    def test_fog_record_layout(self) -> None:
        empty = encode_dlf(to_level_data(MeshNode(), now=NOW).dlf)
        dlf = to_level_data(MeshNode(), now=NOW).dlf
        dlf.fogs = [Fog((1, 2, 3), (0.5, 0.5, 1), 100, blend=1, frequency=0.25)]
        raw = encode_dlf(dlf)

        self.assertEqual(len(raw) - len(empty), DLF_FOG_SIZE)
        fog = raw[len(empty):]
        self.assertEqual(struct.unpack_from("<fff", fog, 0), (1.0, 2.0, 3.0))
        self.assertEqual(struct.unpack_from("<f", fog, 24)[0], 100.0)
        # tolive, blend, frequency end the fixed fields; pads follow
        self.assertEqual(struct.unpack_from("<iif", fog, 68), (0, 1, 0.25))
        self.assertEqual(fog[80:], b"\x00" * 512)


class TestLlfEncoder(unittest.TestCase):
    def test_colors_are_bgra(self) -> None:
        llf = to_level_data(make_ground_plane(), now=NOW).llf
        raw = encode_llf(llf)

        self.assertEqual(len(raw), LLF_RAW_HEADER_SIZE + 16 + 4 * 4)
        self.assertEqual(raw[4:18], b"DANAE_LLH_FILE")
        self.assertEqual(struct.unpack_from("<i", raw, LLF_RAW_HEADER_SIZE)[0], 4)
        self.assertEqual(raw[-4:], b"\xff\xff\xff\xff")

    def test_lights(self) -> None:
        llf = to_level_data(MeshNode(), now=NOW).llf
        llf.lights = [Light((0, 0, 0), (1, 0.5, 0), 100, 400, 1.5)]
        raw = encode_llf(llf)

        self.assertEqual(len(raw), LLF_RAW_HEADER_SIZE + LLF_LIGHT_SIZE + 16)
        self.assertEqual(struct.unpack_from("<i", raw, 280)[0], 1)


if __name__ == "__main__":
    unittest.main()
