from levelcompiler.constants import POLY_QUAD
from levelcompiler.records import ArxPolygon, ArxVertex


def square_polygon(x, z, size=100.0, texture_id=1):
    """Quad in engine space with its lower corner at (x, z)."""
    corners = [(x, z + size), (x, z), (x + size, z + size), (x + size, z)]
    vertices = tuple(ArxVertex(cx, 0.0, cz) for cx, cz in corners)
    return ArxPolygon(
        vertices=vertices,
        norm=(0.0, -1.0, 0.0),
        norm2=(0.0, -1.0, 0.0),
        texture_container_id=texture_id,
        flags=POLY_QUAD,
        area=size * size,
    )


def identity_compressor(body):
    return bytes(body)
