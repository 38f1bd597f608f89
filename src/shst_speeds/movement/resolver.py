"""Resolve Movement speed records to road network geometries."""

from __future__ import annotations

import logging
from typing import AbstractSet, Dict, Mapping, Optional, Protocol

from .domain_types import MatchOutcome, Resolution, SpeedRecord

logger = logging.getLogger(__name__)

DEFAULT_OFFSET_METERS = 4.0


class NetworkIndex(Protocol):
    """Road network reference the resolver and crosswalk loaders rely on."""

    way_set: AbstractSet[str]
    node_set: AbstractSet[str]

    async def resolve_geometry(
        self,
        way_id: str,
        from_node: Optional[str],
        to_node: Optional[str],
        offset: float = 0.0,
    ) -> Optional[Dict[str, object]]:
        ...


def directional_offset(drive_left_side: bool = False) -> float:
    """Lateral offset in metres; positive is the right-hand side of travel."""
    return -DEFAULT_OFFSET_METERS if drive_left_side else DEFAULT_OFFSET_METERS


class SegmentResolver:
    """Crosswalks a speed record to way/node ids and asks the index for its geometry."""

    def __init__(
        self,
        index: NetworkIndex,
        segments: Mapping[str, str],
        junctions: Mapping[str, str],
        *,
        offset: float = DEFAULT_OFFSET_METERS,
    ):
        self._index = index
        self._segments = segments
        self._junctions = junctions
        self.offset = offset

    async def resolve(self, record: SpeedRecord) -> Resolution:
        way_id = self._segments.get(record.segment_id)
        if way_id is None:
            return Resolution(MatchOutcome.MISSING)

        from_node = self._junctions.get(record.from_junction_id)
        to_node = self._junctions.get(record.to_junction_id)
        feature = await self._index.resolve_geometry(way_id, from_node, to_node, self.offset)
        if not feature or not feature.get("geometry"):
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "No geometry for segment %s (way=%s from=%s to=%s)",
                    record.segment_id,
                    way_id,
                    from_node,
                    to_node,
                )
            return Resolution(MatchOutcome.UNMATCHED)

        properties = feature.get("properties")
        if properties is None:
            properties = feature["properties"] = {}
        properties.update(
            {
                "segment": record.segment_id,
                "fromJunction": record.from_junction_id,
                "toJunction": record.to_junction_id,
                "wayId": way_id,
                "fromNodeId": from_node,
                "toNodeId": to_node,
            }
        )
        properties.update(record.measurement_properties())
        return Resolution(MatchOutcome.MATCHED, feature)


__all__ = ["DEFAULT_OFFSET_METERS", "NetworkIndex", "SegmentResolver", "directional_offset"]
