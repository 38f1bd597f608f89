"""Run configuration for the movement speed join."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import yaml

from shst_speeds.tiles.tile_index import DEFAULT_TILE_ROOT

from .domain_types import SpeedFileKind


OUTPUT_SUFFIX = ".out.geojson"


class ConfigurationError(ValueError):
    """User-facing configuration problem; the run stops before writing output."""


@dataclass(frozen=True)
class MovementRunConfig:
    polygon_path: Optional[str] = None
    out: Optional[str] = None
    tile_source: str = "osm/planet-181224"
    tile_hierarchy: int = 6
    tile_root: str = DEFAULT_TILE_ROOT
    filter_day: Optional[int] = None
    filter_hour: Optional[int] = None
    drive_left_side: bool = False
    movement_segments: Optional[str] = None
    movement_junctions: Optional[str] = None
    movement_quarterly_speeds: Optional[str] = None
    movement_hourly_speeds: Optional[str] = None
    stats: bool = False

    # ------------------------------------------------------------------ loaders
    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "MovementRunConfig":
        """Build a config from a mapping; keys may use ``snake_case`` or ``kebab-case``."""
        known = {f.name: f for f in dataclasses.fields(cls)}
        values: Dict[str, object] = {}
        for raw_key, raw_value in data.items():
            key = str(raw_key).strip().replace("-", "_")
            if key not in known:
                raise ValueError(f"Unknown movement config key: {raw_key!r}")
            if raw_value is None:
                continue
            if key in ("tile_hierarchy", "filter_day", "filter_hour"):
                values[key] = int(raw_value)
            elif key in ("drive_left_side", "stats"):
                if not isinstance(raw_value, bool):
                    raise TypeError(f"Movement config key {key!r} must be a boolean")
                values[key] = raw_value
            else:
                values[key] = str(raw_value)
        return cls(**values)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "MovementRunConfig":
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Movement config YAML not found at {config_path}")
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
        if not isinstance(data, Mapping):
            raise TypeError("Movement config YAML must contain a mapping at the top level")
        return cls.from_mapping(data)

    def with_overrides(self, **overrides: object) -> "MovementRunConfig":
        """Return a copy with every non-``None`` override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return dataclasses.replace(self, **changes)

    # --------------------------------------------------------------- validation
    def validate(self) -> None:
        if not self.polygon_path:
            raise ConfigurationError(
                "required polygon file not specified... pass a GeoJSON polygon as the first argument"
            )
        if not self.movement_segments:
            raise ConfigurationError(
                "required Movement segments file not specified... use --movement-segments to locate file"
            )
        if not self.movement_junctions:
            raise ConfigurationError(
                "required Movement junctions file not specified... use --movement-junctions to locate file"
            )
        if not self.movement_quarterly_speeds and not self.movement_hourly_speeds:
            raise ConfigurationError(
                "required quarterly or hourly speed data not specified... use "
                "--movement-quarterly-speeds or --movement-hourly-speeds to locate file"
            )
        if self.movement_quarterly_speeds and self.movement_hourly_speeds:
            raise ConfigurationError(
                "--movement-quarterly-speeds and --movement-hourly-speeds are mutually exclusive"
            )

    def reserved_options_in_use(self) -> List[str]:
        """Options that are accepted but not applied by the join."""
        in_use = []
        if self.filter_day is not None:
            in_use.append("--filter-day")
        if self.filter_hour is not None:
            in_use.append("--filter-hour")
        if self.stats:
            in_use.append("--stats")
        return in_use

    # ---------------------------------------------------------------- derived
    @property
    def speed_file_kind(self) -> SpeedFileKind:
        if self.movement_quarterly_speeds:
            return SpeedFileKind.QUARTERLY
        if self.movement_hourly_speeds:
            return SpeedFileKind.HOURLY
        raise ConfigurationError("no speed file configured")

    @property
    def speeds_path(self) -> str:
        path = self.movement_quarterly_speeds or self.movement_hourly_speeds
        if not path:
            raise ConfigurationError("no speed file configured")
        return path

    @property
    def output_path(self) -> str:
        return self.out or self.speeds_path + OUTPUT_SUFFIX


__all__ = ["ConfigurationError", "MovementRunConfig", "OUTPUT_SUFFIX"]
