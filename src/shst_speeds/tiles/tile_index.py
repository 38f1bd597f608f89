"""In-memory index over cached road network tiles."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, List, Mapping, Optional, Sequence, Set, Tuple

from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union

from .geometry import Coordinate, offset_line, slice_between_nodes
from .tile_paths import TilePath, TilePathGroup, TilePathParams, TileType

logger = logging.getLogger(__name__)

DEFAULT_TILE_ROOT = os.path.join("~", ".shst", "cache", "tiles")
METADATA_PROPERTIES = ("roadClass", "name")


@dataclass(frozen=True)
class _Way:
    coordinates: Tuple[Coordinate, ...]
    node_ids: Tuple[str, ...]


class TileIndex:
    """Way/node index built from GeoJSON tiles stored under ``tile_root``."""

    def __init__(self, tile_root: str | Path = DEFAULT_TILE_ROOT):
        self.tile_root = Path(tile_root).expanduser()
        self._ways: Dict[str, _Way] = {}
        self._way_metadata: Dict[str, Dict[str, object]] = {}
        self._node_ids: Set[str] = set()
        self._indexed: Set[str] = set()
        self.reference_count = 0
        self.way_set: FrozenSet[str] = frozenset()
        self.node_set: FrozenSet[str] = frozenset()

    # ------------------------------------------------------------------ loaders
    async def index_tiles_by_path_group(self, group: TilePathGroup) -> None:
        loaded = 0
        for tile_path in group.iter_paths():
            key = str(tile_path)
            if key in self._indexed:
                continue
            payload = await asyncio.to_thread(self._read_tile, self.tile_root / key)
            self._indexed.add(key)
            if payload is None:
                continue
            self._index_features(tile_path, payload.get("features") or [])
            loaded += 1
        self.way_set = frozenset(self._ways)
        self.node_set = frozenset(self._node_ids)
        logger.info(
            "Indexed %d tiles: %d ways, %d nodes, %d references",
            loaded,
            len(self.way_set),
            len(self.node_set),
            self.reference_count,
        )

    @staticmethod
    def _read_tile(path: Path) -> Optional[Mapping[str, object]]:
        if not path.exists():
            logger.debug("Tile %s not cached; skipping", path)
            return None
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    def _index_features(self, tile_path: TilePath, features: Sequence[Mapping]) -> None:
        if tile_path.tile_type is TileType.GEOMETRY:
            for feature in features:
                self._add_way(feature, tile_path)
        elif tile_path.tile_type is TileType.INTERSECTION:
            for feature in features:
                node_id = (feature.get("properties") or {}).get("nodeId")
                if node_id is not None:
                    self._node_ids.add(str(node_id))
        elif tile_path.tile_type is TileType.METADATA:
            for feature in features:
                properties = feature.get("properties") or {}
                way_id = properties.get("wayId")
                if way_id is None:
                    continue
                self._way_metadata.setdefault(str(way_id), {}).update(
                    {k: properties[k] for k in METADATA_PROPERTIES if k in properties}
                )
        else:
            self.reference_count += len(features)

    def _add_way(self, feature: Mapping, tile_path: TilePath) -> None:
        properties = feature.get("properties") or {}
        geometry = feature.get("geometry") or {}
        way_id = properties.get("wayId")
        if way_id is None or geometry.get("type") != "LineString":
            return
        way_id = str(way_id)
        if way_id in self._ways:
            return
        coordinates = tuple((float(c[0]), float(c[1])) for c in geometry.get("coordinates") or [])
        node_ids = tuple(str(n) for n in properties.get("nodeIds") or [])
        if len(coordinates) != len(node_ids) or len(coordinates) < 2:
            logger.warning(
                "Way %s in %s has %d coordinates for %d node ids; skipping",
                way_id,
                tile_path,
                len(coordinates),
                len(node_ids),
            )
            return
        self._ways[way_id] = _Way(coordinates=coordinates, node_ids=node_ids)
        self._node_ids.update(node_ids)

    # --------------------------------------------------------------------- API
    async def resolve_geometry(
        self,
        way_id: str,
        from_node: Optional[str],
        to_node: Optional[str],
        offset: float = 0.0,
    ) -> Optional[Dict[str, object]]:
        """Return a GeoJSON Feature for the way between two nodes, or ``None``."""
        way = self._ways.get(way_id)
        if way is None or from_node is None or to_node is None:
            return None
        coordinates = slice_between_nodes(way.coordinates, way.node_ids, from_node, to_node)
        if coordinates is None:
            return None
        if offset:
            coordinates = offset_line(coordinates, offset)
        return {
            "type": "Feature",
            "properties": dict(self._way_metadata.get(way_id, {})),
            "geometry": {
                "type": "LineString",
                "coordinates": [[lon, lat] for lon, lat in coordinates],
            },
        }


async def build_tile_index(
    polygon: BaseGeometry,
    params: TilePathParams,
    tile_root: str | Path = DEFAULT_TILE_ROOT,
    *,
    buffer: float = 0.0,
) -> TileIndex:
    """Cover ``polygon`` with tiles of every type and index them."""
    group = TilePathGroup.from_polygon(polygon, buffer, params)
    group.add_type(TileType.METADATA)
    group.add_type(TileType.GEOMETRY)
    group.add_type(TileType.REFERENCE)
    group.add_type(TileType.INTERSECTION)
    logger.debug("Polygon covered by %d tiles", len(group.tiles))
    index = TileIndex(tile_root)
    await index.index_tiles_by_path_group(group)
    return index


def load_boundary_polygon(path: str | Path) -> BaseGeometry:
    """Read a GeoJSON Polygon/MultiPolygon (bare, Feature or FeatureCollection)."""
    with open(path, "r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, Mapping):
        raise ValueError(f"{path} does not contain a GeoJSON object.")

    kind = payload.get("type")
    if kind == "FeatureCollection":
        geometries = [f.get("geometry") for f in payload.get("features") or []]
    elif kind == "Feature":
        geometries = [payload.get("geometry")]
    else:
        geometries = [payload]

    shapes: List[BaseGeometry] = []
    for geometry in geometries:
        if not geometry or geometry.get("type") not in ("Polygon", "MultiPolygon"):
            raise ValueError(f"{path} must contain Polygon or MultiPolygon geometries.")
        shapes.append(shape(geometry))
    if not shapes:
        raise ValueError(f"{path} contains no polygon geometry.")
    return shapes[0] if len(shapes) == 1 else unary_union(shapes)


__all__ = ["DEFAULT_TILE_ROOT", "TileIndex", "build_tile_index", "load_boundary_polygon"]
