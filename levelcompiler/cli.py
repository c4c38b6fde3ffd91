"""
Command-line level compiler: glTF/GLB scene -> Arx level files

Writes fast.fts, levelN.dlf and levelN.llf under the output directory using
their paths relative to the game's data root.

Usage:
  python -m levelcompiler input.glb out/ --level 1
  python -m levelcompiler input.gltf out/ --bin input.bin
  python -m levelcompiler --ground-plane out/

Every quad must be exported as the triangle pair (a, b, d), (b, c, d), so the
second triangle repeats the b-d edge of the first. Meshes triangulated as
(0, 1, 3), (0, 3, 2) are rejected as malformed.
"""

import argparse
import os
import sys
import traceback

from .assembler import CompileOptions, to_level_data
from .compiler import compile_level
from .constants import DEFAULT_LEVEL_IDX, DEFAULT_OFFSET
from .gltf_loader import load_gltf_scene
from .scene import make_ground_plane

QUAD_LAYOUT_NOTE = (
    "Quads must be triangulated as (a, b, d), (b, c, d); "
    "meshes split as (0, 1, 3), (0, 3, 2) are rejected as malformed."
)


def write_level(files, output_dir: str, log=print) -> None:
    for relative_path, data in files.items():
        path = os.path.join(output_dir, *relative_path.split("/"))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)
        log(f"Wrote {path} ({len(data)} bytes)")


def run_compile(input_path, bin_path, output_dir: str, level_idx: int, offset, ground_plane: bool, log=print) -> None:
    if ground_plane:
        root = make_ground_plane()
        log("Compiling the default ground plane")
    else:
        root = load_gltf_scene(input_path, bin_path)
        log(f"Loaded {input_path}")

    options = CompileOptions(offset=tuple(offset))
    level_data = to_level_data(root, level_idx=level_idx, options=options)
    log(f"{len(level_data.fts.polygons)} polygons, "
        f"{len(level_data.fts.texture_containers)} texture containers")

    compiled = compile_level(level_data, log=log)
    write_level(compiled.files(), output_dir, log=log)


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Compile a glTF/GLB scene into Arx Fatalis level files.",
        epilog=QUAD_LAYOUT_NOTE,
    )
    p.add_argument("input", nargs="?", default=None, help="Input .glb or .gltf")
    p.add_argument("output", help="Output directory")
    p.add_argument("--bin", dest="bin", default=None, help="External .bin for .gltf")
    p.add_argument("--level", type=int, default=DEFAULT_LEVEL_IDX, help="Level index, e.g. 1")
    p.add_argument("--offset", type=float, nargs=3, default=list(DEFAULT_OFFSET),
                   metavar=("X", "Y", "Z"), help="World origin offset in engine units")
    p.add_argument("--ground-plane", action="store_true",
                   help="Ignore the input and compile a single 100x100 ground quad")
    args = p.parse_args(argv)
    if args.input is None and not args.ground_plane:
        p.error("an input file is required unless --ground-plane is given")
    return args


def main(argv=None):
    args = parse_args(argv)
    try:
        run_compile(
            input_path=args.input,
            bin_path=args.bin,
            output_dir=args.output,
            level_idx=args.level,
            offset=args.offset,
            ground_plane=args.ground_plane,
        )
    except Exception:
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
