"""Exceptions raised while compiling a level."""


class LevelCompileError(Exception):
    """Base class for every fatal compile failure."""


class MalformedMeshError(LevelCompileError):
    """Mesh data that cannot be turned into engine quads."""


class HeaderMismatchError(LevelCompileError):
    """Header offset reported for a format lies beyond its encoded buffer."""


class CompressionError(LevelCompileError):
    """The body codec failed or is not available."""
