"""Core dataclasses shared across the movement package."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Dict, Optional, Union


class SpeedFileKind(str, enum.Enum):
    """Which measurement file shape is active for a run."""

    QUARTERLY = "quarterly"
    HOURLY = "hourly"


class MatchOutcome(str, enum.Enum):
    MATCHED = "matched"
    UNMATCHED = "unmatched"  # segment known, geometry did not resolve
    MISSING = "missing"  # segment outside the crosswalk


@dataclass(frozen=True)
class HourlySpeedRecord:
    """Row of an hourly speed file (fields 0-7)."""

    year: Union[int, float]
    quarter: Union[int, float]
    hour: Union[int, float]
    segment_id: str
    from_junction_id: str
    to_junction_id: str
    mean: float
    std_dev: float

    def measurement_properties(self) -> Dict[str, object]:
        return {
            "year": self.year,
            "quarter": self.quarter,
            "hour": self.hour,
            "mean": self.mean,
            "meanStd": self.std_dev,
        }


@dataclass(frozen=True)
class AggregatedSpeedRecord(HourlySpeedRecord):
    """Row of a quarterly aggregated speed file (fields 0-9)."""

    p50: float = float("nan")
    p85: float = float("nan")

    def measurement_properties(self) -> Dict[str, object]:
        properties = super().measurement_properties()
        properties["p50"] = self.p50
        properties["p85"] = self.p85
        return properties


SpeedRecord = Union[AggregatedSpeedRecord, HourlySpeedRecord]


@dataclass
class MatchCounters:
    matched: int = 0
    unmatched: int = 0
    missing: int = 0

    def add(self, outcome: MatchOutcome) -> None:
        if outcome is MatchOutcome.MATCHED:
            self.matched += 1
        elif outcome is MatchOutcome.UNMATCHED:
            self.unmatched += 1
        else:
            self.missing += 1

    @property
    def total(self) -> int:
        return self.matched + self.unmatched + self.missing


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one speed record; ``feature`` is set only when matched."""

    outcome: MatchOutcome
    feature: Optional[Dict[str, object]] = None


__all__ = [
    "AggregatedSpeedRecord",
    "HourlySpeedRecord",
    "MatchCounters",
    "MatchOutcome",
    "Resolution",
    "SpeedFileKind",
    "SpeedRecord",
]
