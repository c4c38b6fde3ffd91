"""Compile 3D quad meshes into Arx Fatalis level files (FTS, DLF, LLF)."""

from .assembler import CompileOptions, to_level_data
from .compiler import CompiledLevel, compile_level, compile_record, get_header_size, split_at
from .errors import CompressionError, HeaderMismatchError, LevelCompileError, MalformedMeshError
from .scene import MeshGeometry, MeshNode, flatten_transforms, make_ground_plane

__version__ = "1.0.0"
