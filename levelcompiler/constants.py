"""Engine constants for Arx Fatalis / Arx Libertatis level files."""

# Map grid
CELL_SIZE = 100
MAP_WIDTH_IN_CELLS = 160
MAP_DEPTH_IN_CELLS = 160

# Polygon type flags (PolyTypeFlag)
POLY_NO_SHADOW = 1 << 0
POLY_DOUBLESIDED = 1 << 1
POLY_TRANS = 1 << 2
POLY_WATER = 1 << 3
POLY_GLOW = 1 << 4
POLY_IGNORE = 1 << 5
POLY_QUAD = 1 << 6
POLY_TILED = 1 << 7
POLY_METAL = 1 << 8
POLY_HIDE = 1 << 9
POLY_STONE = 1 << 10
POLY_WOOD = 1 << 11
POLY_GRAVEL = 1 << 12
POLY_EARTH = 1 << 13
POLY_NOCOL = 1 << 14
POLY_LAVA = 1 << 15
POLY_CLIMB = 1 << 16
POLY_FALL = 1 << 17
POLY_NOPATH = 1 << 18
POLY_NODRAW = 1 << 19

# File versions / identifiers
FTS_VERSION = 0.141
DLF_VERSION = 1.44
LLF_VERSION = 1.44
DLF_IDENT = "DANAE_FILE"
LLF_IDENT = "DANAE_LLH_FILE"

# Uncompressed header sizes
FTS_PRIMARY_HEADER_SIZE = 280   # UNIQUE_HEADER
FTS_SECONDARY_HEADER_SIZE = 768  # UNIQUE_HEADER3, repeated `count` times
FTS_COUNT_OFFSET = 256           # UNIQUE_HEADER.count
DLF_HEADER_SIZE = 8520           # DANAE_LS_HEADER
LLF_HEADER_SIZE = 0              # engine inflates the whole file

# Record sizes
FTS_POLYGON_SIZE = 172
FTS_TEXTURE_CONTAINER_SIZE = 264
DLF_SCENE_SIZE = 640
DLF_INTERACTIVE_OBJECT_SIZE = 664
DLF_FOG_SIZE = 592
DLF_PATH_SIZE = 608
DLF_PATHWAY_SIZE = 68
LLF_RAW_HEADER_SIZE = 7464
LLF_LIGHT_SIZE = 296

TEXTURE_DIRECTORY = "GRAPH\\OBJ3D\\TEXTURES\\"

# Defaults taken from the browser editor
GENERATOR_ID = "Arx Fatalis Browser Editor - v1.0.0"
DEFAULT_TEXTURE = "l1_prison_[stone]_ground19.jpg"
DEFAULT_LEVEL_IDX = 1
DEFAULT_OFFSET = (6000.0, 0.0, 6000.0)
DEFAULT_PLAYER_POSITION = (0.0, -180.0, 0.0)  # 0/0/0 adjusted to player height
DEFAULT_PLAYER_ORIENTATION = (0.0, 0.0, 0.0)
VERTEX_PRECISION = 10

# Room 0 is never used by the engine; everything goes into room 1
ROOM_COUNT = 2
DEFAULT_ROOM_DISTANCES = (
    (-1.0, (0.0, 0.0, 0.0), (1.0, 0.0, 0.0)),
    (-1.0, (0.0, 0.0, 0.0), (0.0, 1.0, 0.0)),
    (-1.0, (0.984375, 0.984375, 0.0), (0.0, 0.0, 0.0)),
    (-1.0, (0.0, 0.0, 0.0), (0.0, 0.0, 0.0)),
)

# PKWARE DCL implode settings
IMPLODE_MODE_BINARY = "binary"
IMPLODE_DICTIONARY_LARGE = "large"
IMPLODE_DICTIONARY_SIZES = {"small": 1024, "medium": 2048, "large": 4096}


def fts_path(level_idx: int) -> str:
    return f"game/graph/levels/level{level_idx}/fast.fts"


def dlf_path(level_idx: int) -> str:
    return f"graph/levels/level{level_idx}/level{level_idx}.dlf"


def llf_path(level_idx: int) -> str:
    return f"graph/levels/level{level_idx}/level{level_idx}.llf"
