from __future__ import annotations

import asyncio
import math
from typing import Dict, List, Optional, Tuple

import pytest

from shst_speeds.movement.domain_types import (
    AggregatedSpeedRecord,
    HourlySpeedRecord,
    MatchOutcome,
)
from shst_speeds.movement.resolver import SegmentResolver, directional_offset


class StubIndex:
    def __init__(self, resolvable: bool = True):
        self.resolvable = resolvable
        self.way_set = {"100"}
        self.node_set = {"1", "2"}
        self.calls: List[Tuple[str, Optional[str], Optional[str], float]] = []

    async def resolve_geometry(self, way_id, from_node, to_node, offset=0.0):
        self.calls.append((way_id, from_node, to_node, offset))
        if not self.resolvable:
            return None
        return {
            "type": "Feature",
            "properties": {},
            "geometry": {"type": "LineString", "coordinates": [[0.0, 0.0], [1.0, 1.0]]},
        }


def _resolve(resolver: SegmentResolver, record) -> object:
    return asyncio.run(resolver.resolve(record))


def _record(segment_id: str = "seg-a", **overrides) -> AggregatedSpeedRecord:
    values: Dict[str, object] = dict(
        year=2018,
        quarter=4,
        hour=7,
        segment_id=segment_id,
        from_junction_id="j1",
        to_junction_id="j2",
        mean=31.5,
        std_dev=4.2,
        p50=30.0,
        p85=38.5,
    )
    values.update(overrides)
    return AggregatedSpeedRecord(**values)


SEGMENTS = {"seg-a": "100"}
JUNCTIONS = {"j1": "1", "j2": "2"}


def test_unknown_segment_is_missing_without_resolution():
    index = StubIndex()
    resolver = SegmentResolver(index, SEGMENTS, JUNCTIONS)

    resolution = _resolve(resolver, _record("seg-unknown"))

    assert resolution.outcome is MatchOutcome.MISSING
    assert resolution.feature is None
    assert index.calls == []


def test_empty_geometry_is_unmatched():
    index = StubIndex(resolvable=False)
    resolver = SegmentResolver(index, SEGMENTS, JUNCTIONS)

    resolution = _resolve(resolver, _record())

    assert resolution.outcome is MatchOutcome.UNMATCHED
    assert index.calls == [("100", "1", "2", 4.0)]


def test_matched_feature_carries_provenance_and_measurements():
    resolver = SegmentResolver(StubIndex(), SEGMENTS, JUNCTIONS)

    resolution = _resolve(resolver, _record())

    assert resolution.outcome is MatchOutcome.MATCHED
    properties = resolution.feature["properties"]
    assert properties == {
        "segment": "seg-a",
        "fromJunction": "j1",
        "toJunction": "j2",
        "wayId": "100",
        "fromNodeId": "1",
        "toNodeId": "2",
        "year": 2018,
        "quarter": 4,
        "hour": 7,
        "mean": 31.5,
        "meanStd": 4.2,
        "p50": 30.0,
        "p85": 38.5,
    }


def test_hourly_feature_has_no_percentiles():
    record = HourlySpeedRecord(
        year=2018,
        quarter=1,
        hour=0,
        segment_id="seg-a",
        from_junction_id="j1",
        to_junction_id="j2",
        mean=10.0,
        std_dev=float("nan"),
    )
    resolver = SegmentResolver(StubIndex(), SEGMENTS, JUNCTIONS)

    properties = _resolve(resolver, record).feature["properties"]

    assert "p50" not in properties and "p85" not in properties
    assert math.isnan(properties["meanStd"])


def test_unknown_junctions_still_call_the_index():
    index = StubIndex()
    resolver = SegmentResolver(index, SEGMENTS, JUNCTIONS)

    resolution = _resolve(resolver, _record(from_junction_id="jx", to_junction_id="j2"))

    assert index.calls == [("100", None, "2", 4.0)]
    assert resolution.outcome is MatchOutcome.MATCHED
    assert resolution.feature["properties"]["fromNodeId"] is None


@pytest.mark.parametrize(("left", "expected"), [(False, 4.0), (True, -4.0)])
def test_left_side_driving_flips_offset_sign(left, expected):
    index = StubIndex()
    resolver = SegmentResolver(index, SEGMENTS, JUNCTIONS, offset=directional_offset(left))

    _resolve(resolver, _record())

    assert directional_offset(left) == expected
    assert index.calls[0][3] == expected
