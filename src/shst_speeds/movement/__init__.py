"""Movement speed join package exports."""

from .config import ConfigurationError, MovementRunConfig
from .crosswalk import Crosswalk, load_crosswalk
from .domain_types import (
    AggregatedSpeedRecord,
    HourlySpeedRecord,
    MatchCounters,
    MatchOutcome,
    Resolution,
    SpeedFileKind,
)
from .geojson_writer import FeatureCollectionWriter, open_feature_collection
from .pipeline import MovementPipeline, MovementRunSummary, join_speed_records
from .resolver import NetworkIndex, SegmentResolver, directional_offset
from .speed_reader import count_speed_records, iter_speed_records

__all__ = [
    "AggregatedSpeedRecord",
    "ConfigurationError",
    "Crosswalk",
    "FeatureCollectionWriter",
    "HourlySpeedRecord",
    "MatchCounters",
    "MatchOutcome",
    "MovementPipeline",
    "MovementRunConfig",
    "MovementRunSummary",
    "NetworkIndex",
    "Resolution",
    "SegmentResolver",
    "SpeedFileKind",
    "count_speed_records",
    "directional_offset",
    "iter_speed_records",
    "join_speed_records",
    "load_crosswalk",
    "open_feature_collection",
]
