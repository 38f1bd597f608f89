"""Line slicing and lateral offset helpers for way geometries."""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

from shapely.geometry import LineString
from shapely.ops import linemerge

from .tile_paths import METERS_PER_DEGREE_LAT

Coordinate = Tuple[float, float]

METERS_PER_DEGREE_LON_EQUATOR = 111_320.0


def slice_between_nodes(
    coordinates: Sequence[Coordinate],
    node_ids: Sequence[str],
    from_node: str,
    to_node: str,
) -> Optional[List[Coordinate]]:
    """Return the coordinates from ``from_node`` to ``to_node`` in travel order.

    The slice is reversed when ``from_node`` appears after ``to_node`` on the
    way. ``None`` is returned when either node is not on the way or both map
    to the same vertex.
    """
    try:
        start = list(node_ids).index(from_node)
        end = list(node_ids).index(to_node)
    except ValueError:
        return None
    if start == end:
        return None
    if start < end:
        return [tuple(c) for c in coordinates[start : end + 1]]
    return [tuple(c) for c in reversed(coordinates[end : start + 1])]


def offset_line(coordinates: Sequence[Coordinate], offset_m: float) -> List[Coordinate]:
    """Shift a lon/lat line ``offset_m`` metres to the right of travel.

    Negative offsets shift to the left. The line is projected to a local
    equirectangular plane around its mean latitude before offsetting.
    """
    if not offset_m:
        return [tuple(c) for c in coordinates]
    lat0 = sum(lat for _, lat in coordinates) / len(coordinates)
    kx = METERS_PER_DEGREE_LON_EQUATOR * math.cos(math.radians(lat0))
    ky = METERS_PER_DEGREE_LAT
    local = LineString([(lon * kx, lat * ky) for lon, lat in coordinates])
    # shapely offsets positive distances to the left
    shifted = local.offset_curve(-offset_m)
    if shifted.geom_type == "MultiLineString":
        shifted = linemerge(shifted)
        if shifted.geom_type == "MultiLineString":
            shifted = max(shifted.geoms, key=lambda part: part.length)
    if shifted.is_empty:
        return [tuple(c) for c in coordinates]
    return [(x / kx, y / ky) for x, y in shifted.coords]


__all__ = ["offset_line", "slice_between_nodes"]
