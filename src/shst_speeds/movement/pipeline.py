"""Join Movement speed files onto road network geometries."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from shapely.geometry.base import BaseGeometry

from shst_speeds.tiles.tile_index import build_tile_index, load_boundary_polygon
from shst_speeds.tiles.tile_paths import TilePathParams

from .config import ConfigurationError, MovementRunConfig
from .crosswalk import Crosswalk, load_crosswalk
from .domain_types import MatchCounters, Resolution, SpeedFileKind, SpeedRecord
from .geojson_writer import FeatureCollectionWriter, open_feature_collection
from .resolver import NetworkIndex, SegmentResolver, directional_offset
from .speed_reader import count_speed_records, iter_speed_records

logger = logging.getLogger(__name__)

IndexBuilder = Callable[[BaseGeometry, TilePathParams, str], Awaitable[NetworkIndex]]


@dataclass
class MovementRunSummary:
    counters: MatchCounters
    output_path: str
    speed_file_kind: SpeedFileKind
    segments: Crosswalk
    junctions: Crosswalk


async def join_speed_records(
    records: Iterable[SpeedRecord],
    resolver: SegmentResolver,
    writer: FeatureCollectionWriter,
    *,
    on_record: Optional[Callable[[Resolution], None]] = None,
) -> MatchCounters:
    """Resolve and write records one at a time, preserving input order."""
    counters = MatchCounters()
    for record in records:
        resolution = await resolver.resolve(record)
        counters.add(resolution.outcome)
        if resolution.feature is not None:
            writer.write_feature(resolution.feature)
        if on_record is not None:
            on_record(resolution)
    return counters


class MovementPipeline:
    """End-to-end run: tiles, crosswalks, speed stream, GeoJSON output."""

    def __init__(
        self,
        config: MovementRunConfig,
        *,
        index_builder: IndexBuilder = build_tile_index,
        console: Console | None = None,
    ):
        self.config = config
        self._index_builder = index_builder
        self._console = console or Console(stderr=True)

    def run(self) -> Optional[MovementRunSummary]:
        return asyncio.run(self.run_async())

    async def run_async(self) -> Optional[MovementRunSummary]:
        config = self.config
        try:
            config.validate()
        except ConfigurationError as exc:
            self._console.print(f"[bold dark_orange]  {exc}[/]")
            logger.warning("Movement run not started: %s", exc)
            return None
        for option in config.reserved_options_in_use():
            logger.warning("%s is reserved and is not applied to the join", option)

        polygon = load_boundary_polygon(config.polygon_path)
        self._status("Loading SharedStreets tiles...")
        params = TilePathParams(source=config.tile_source, tile_hierarchy=config.tile_hierarchy)
        index = await self._index_builder(polygon, params, config.tile_root)

        self._status("Loading Movement segments...")
        segments = load_crosswalk(config.movement_segments, index.way_set, label="segment")
        self._console.print(f"     total segments: {len(segments)}")

        self._status("Loading Movement junctions...")
        junctions = load_crosswalk(config.movement_junctions, index.node_set, label="junction")
        self._console.print(f"     total junctions: {len(junctions)}")

        kind = config.speed_file_kind
        speeds_path = config.speeds_path
        output_path = config.output_path
        self._status(f"Processing Movement {kind.value} speed data into: {output_path}")

        resolver = SegmentResolver(
            index,
            segments,
            junctions,
            offset=directional_offset(config.drive_left_side),
        )
        total = count_speed_records(speeds_path)
        progress = self._make_progress()
        with progress, open_feature_collection(output_path) as writer:
            task_id = progress.add_task("Speed records", total=total or None)
            counters = await join_speed_records(
                iter_speed_records(speeds_path, kind),
                resolver,
                writer,
                on_record=lambda _: progress.advance(task_id),
            )

        self._console.print(f"matched segments: {counters.matched}")
        self._console.print(f"unmatched segments: {counters.unmatched}")
        self._console.print(f"filtered segments (outside polygon boundary): {counters.missing}")
        logger.info(
            "Wrote %d features to %s (matched=%d unmatched=%d missing=%d)",
            writer.features_written,
            output_path,
            counters.matched,
            counters.unmatched,
            counters.missing,
        )
        return MovementRunSummary(
            counters=counters,
            output_path=output_path,
            speed_file_kind=kind,
            segments=segments,
            junctions=junctions,
        )

    def _status(self, message: str) -> None:
        self._console.print(f"[bold green]  {message}[/]")

    def _make_progress(self) -> Progress:
        return Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            BarColumn(bar_width=None),
            TaskProgressColumn(),
            TextColumn("{task.completed:,} lines", justify="right"),
            TimeElapsedColumn(),
            console=self._console,
            transient=True,
            disable=not self._console.is_terminal,
        )


__all__ = ["MovementPipeline", "MovementRunSummary", "join_speed_records"]
