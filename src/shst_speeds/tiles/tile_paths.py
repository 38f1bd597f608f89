"""Tile addressing for the SharedStreets-style road network cache."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Iterator, List, Set, Tuple

from shapely.geometry import box
from shapely.geometry.base import BaseGeometry

TILE_ZOOM = 12
METERS_PER_DEGREE_LAT = 110_540.0


class TileType(str, enum.Enum):
    METADATA = "metadata"
    GEOMETRY = "geometry"
    REFERENCE = "reference"
    INTERSECTION = "intersection"


@dataclass(frozen=True)
class TilePathParams:
    """Source/hierarchy pair shared by every tile of a path group."""

    source: str = "osm/planet-181224"
    tile_hierarchy: int = 6


@dataclass(frozen=True)
class TilePath:
    """Single cached tile file, relative to the tile root."""

    x: int
    y: int
    tile_type: TileType
    params: TilePathParams
    zoom: int = TILE_ZOOM

    def __str__(self) -> str:
        return (
            f"{self.params.source}/{self.zoom}-{self.x}-{self.y}."
            f"{self.tile_type.value}.{self.params.tile_hierarchy}.geojson"
        )


@dataclass
class TilePathGroup:
    """Set of tile keys covering a polygon, crossed with the requested tile types."""

    params: TilePathParams
    tiles: List[Tuple[int, int]] = field(default_factory=list)
    types: List[TileType] = field(default_factory=list)

    @classmethod
    def from_polygon(
        cls, polygon: BaseGeometry, buffer: float, params: TilePathParams
    ) -> "TilePathGroup":
        """Cover ``polygon`` (buffered by ``buffer`` metres) with zoom-12 tiles."""
        if polygon.is_empty:
            raise ValueError("Cannot build a tile path group from an empty polygon.")
        area = polygon
        if buffer:
            area = polygon.buffer(buffer / METERS_PER_DEGREE_LAT)
        min_lon, min_lat, max_lon, max_lat = area.bounds
        x_min, y_min = lon_lat_to_tile(min_lon, max_lat, TILE_ZOOM)
        x_max, y_max = lon_lat_to_tile(max_lon, min_lat, TILE_ZOOM)
        tiles: List[Tuple[int, int]] = []
        for x in range(x_min, x_max + 1):
            for y in range(y_min, y_max + 1):
                if area.intersects(box(*tile_bounds(x, y, TILE_ZOOM))):
                    tiles.append((x, y))
        return cls(params=params, tiles=tiles)

    def add_type(self, tile_type: TileType) -> None:
        if tile_type not in self.types:
            self.types.append(tile_type)

    def iter_paths(self) -> Iterator[TilePath]:
        for tile_type in self.types:
            for x, y in self.tiles:
                yield TilePath(x=x, y=y, tile_type=tile_type, params=self.params)

    @property
    def tile_keys(self) -> Set[Tuple[int, int]]:
        return set(self.tiles)


def lon_lat_to_tile(lon: float, lat: float, zoom: int) -> Tuple[int, int]:
    """Slippy-map tile containing the coordinate, clamped to the valid range."""
    n = 2**zoom
    lat = min(max(lat, -85.0511), 85.0511)
    x = int((lon + 180.0) / 360.0 * n)
    lat_rad = math.radians(lat)
    y = int((1.0 - math.asinh(math.tan(lat_rad)) / math.pi) / 2.0 * n)
    return min(max(x, 0), n - 1), min(max(y, 0), n - 1)


def tile_bounds(x: int, y: int, zoom: int) -> Tuple[float, float, float, float]:
    """Return ``(min_lon, min_lat, max_lon, max_lat)`` for a slippy-map tile."""
    n = 2**zoom

    def _lat(row: int) -> float:
        return math.degrees(math.atan(math.sinh(math.pi * (1 - 2 * row / n))))

    return x / n * 360.0 - 180.0, _lat(y + 1), (x + 1) / n * 360.0 - 180.0, _lat(y)


__all__ = [
    "TILE_ZOOM",
    "TilePath",
    "TilePathGroup",
    "TilePathParams",
    "TileType",
    "lon_lat_to_tile",
    "tile_bounds",
]
