"""Streaming readers for Movement quarterly and hourly speed files."""

from __future__ import annotations

import csv
import logging
import math
import re
from pathlib import Path
from typing import Iterator, List, Union

from .domain_types import AggregatedSpeedRecord, HourlySpeedRecord, SpeedFileKind, SpeedRecord

logger = logging.getLogger(__name__)

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))")


def parse_int(token: str) -> Union[int, float]:
    """Parse the leading integer of ``token``; ``NaN`` when there is none."""
    match = _INT_PREFIX.match(token or "")
    if match is None:
        return math.nan
    return int(match.group(1))


def parse_float(token: str) -> float:
    """Parse the leading decimal number of ``token``; ``NaN`` when there is none."""
    match = _FLOAT_PREFIX.match(token or "")
    if match is None:
        return math.nan
    return float(match.group(1))


def _field(row: List[str], index: int) -> str:
    return row[index].strip() if index < len(row) else ""


def parse_speed_row(row: List[str], kind: SpeedFileKind) -> SpeedRecord:
    """Map positional fields of one speed row onto the record type for ``kind``."""
    common = dict(
        year=parse_int(_field(row, 0)),
        quarter=parse_int(_field(row, 1)),
        hour=parse_int(_field(row, 2)),
        segment_id=_field(row, 3),
        from_junction_id=_field(row, 4),
        to_junction_id=_field(row, 5),
        mean=parse_float(_field(row, 6)),
        std_dev=parse_float(_field(row, 7)),
    )
    if kind is SpeedFileKind.QUARTERLY:
        return AggregatedSpeedRecord(
            **common,
            p50=parse_float(_field(row, 8)),
            p85=parse_float(_field(row, 9)),
        )
    return HourlySpeedRecord(**common)


def _iter_rows(path: str | Path) -> Iterator[List[str]]:
    with Path(path).open("r", encoding="utf-8", newline="") as handle:
        reader = csv.reader(handle, quoting=csv.QUOTE_NONE)
        next(reader, None)
        for row in reader:
            if not row or not any(field.strip() for field in row):
                continue
            yield row


def iter_speed_records(path: str | Path, kind: SpeedFileKind) -> Iterator[SpeedRecord]:
    """Yield speed records one line at a time, skipping the header."""
    for row in _iter_rows(path):
        yield parse_speed_row(row, kind)


def count_speed_records(path: str | Path) -> int:
    """Number of data rows (header and blank lines excluded)."""
    total = sum(1 for _ in _iter_rows(path))
    logger.debug("Counted %d speed rows in %s", total, path)
    return total


__all__ = [
    "count_speed_records",
    "iter_speed_records",
    "parse_float",
    "parse_int",
    "parse_speed_row",
]
