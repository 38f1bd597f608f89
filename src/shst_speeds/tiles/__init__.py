"""Road network tile cache: tile addressing and the way/node index."""

from .tile_index import DEFAULT_TILE_ROOT, TileIndex, build_tile_index, load_boundary_polygon
from .tile_paths import TilePath, TilePathGroup, TilePathParams, TileType

__all__ = [
    "DEFAULT_TILE_ROOT",
    "TileIndex",
    "TilePath",
    "TilePathGroup",
    "TilePathParams",
    "TileType",
    "build_tile_index",
    "load_boundary_polygon",
]
