"""CLI entry point linking Movement speed data sets with SharedStreets tiles.

Example::

    shst-speeds movement polygon.geojson \
        --movement-junctions=movement-junctions-to-osm-nodes-new-york-2018.csv \
        --movement-segments=movement-segments-to-osm-ways-new-york-2018.csv \
        --movement-quarterly-speeds=movement-speeds-quarterly-by-hod-new-york-2018-Q4.csv
"""

from __future__ import annotations

import argparse
import logging
import os
from typing import Iterable

from .config import MovementRunConfig
from .pipeline import MovementPipeline

TILE_ROOT_ENV = "SHST_TILE_ROOT"


def _add_movement_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("polygon", nargs="?", default=None, help="GeoJSON polygon boundary file.")
    parser.add_argument("--out", "-o", default=None, help="Output file (default: <speeds>.out.geojson).")
    parser.add_argument(
        "--tile-source",
        default=None,
        help="SharedStreets tile source (default: osm/planet-181224).",
    )
    parser.add_argument(
        "--tile-hierarchy",
        type=int,
        default=None,
        help="SharedStreets tile hierarchy (default: 6).",
    )
    parser.add_argument(
        "--tile-root",
        default=os.environ.get(TILE_ROOT_ENV),
        help=f"Directory holding cached tiles (default: ${TILE_ROOT_ENV} or ~/.shst/cache/tiles).",
    )
    parser.add_argument(
        "--filter-day",
        type=int,
        default=None,
        help="Filter day of month (reserved, not applied).",
    )
    parser.add_argument(
        "--filter-hour",
        type=int,
        default=None,
        help="Filter hour of day (reserved, not applied).",
    )
    parser.add_argument(
        "--drive-left-side",
        action="store_true",
        default=None,
        help="Offset road geometries for left-side driving.",
    )
    parser.add_argument("--movement-segments", default=None, help='Movement "segment" file (csv).')
    parser.add_argument("--movement-junctions", default=None, help='Movement "junction" file (csv).')
    parser.add_argument(
        "--movement-quarterly-speeds",
        default=None,
        help="Movement quarterly speed file (csv).",
    )
    parser.add_argument(
        "--movement-hourly-speeds",
        default=None,
        help="Movement hourly speed file (csv).",
    )
    parser.add_argument("--stats", "-s", action="store_true", default=None, help="Reserved.")
    parser.add_argument(
        "--config",
        default=None,
        help="Optional YAML file with the same options; command-line flags take precedence.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Verbosity for the CLI logger.",
    )


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="shst-speeds",
        description="Link third-party speed data sets with SharedStreets road geometries.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    movement = subparsers.add_parser(
        "movement",
        help="links Uber Movement data sets with SharedStreets",
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_movement_arguments(movement)
    return parser.parse_args(None if argv is None else list(argv))


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(message)s",
    )


def build_config(args: argparse.Namespace) -> MovementRunConfig:
    base = MovementRunConfig.from_yaml(args.config) if args.config else MovementRunConfig()
    return base.with_overrides(
        polygon_path=args.polygon,
        out=args.out,
        tile_source=args.tile_source,
        tile_hierarchy=args.tile_hierarchy,
        tile_root=args.tile_root,
        filter_day=args.filter_day,
        filter_hour=args.filter_hour,
        drive_left_side=args.drive_left_side,
        movement_segments=args.movement_segments,
        movement_junctions=args.movement_junctions,
        movement_quarterly_speeds=args.movement_quarterly_speeds,
        movement_hourly_speeds=args.movement_hourly_speeds,
        stats=args.stats,
    )


def main(argv: Iterable[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)
    config = build_config(args)
    MovementPipeline(config).run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
