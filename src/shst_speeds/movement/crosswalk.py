"""Crosswalk loaders mapping Movement ids onto road network ids."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import AbstractSet, Dict, Iterator, Mapping

logger = logging.getLogger(__name__)


class Crosswalk(Mapping[str, str]):
    """Read-only ``external id -> network id`` mapping with load statistics."""

    def __init__(
        self,
        entries: Mapping[str, str],
        *,
        label: str = "crosswalk",
        dropped: int = 0,
        short_rows: int = 0,
    ):
        self._entries: Dict[str, str] = dict(entries)
        self.label = label
        self.dropped = dropped
        self.short_rows = short_rows

    def __getitem__(self, key: str) -> str:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def admitted(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Crosswalk(label={self.label!r}, admitted={self.admitted}, dropped={self.dropped})"


def load_crosswalk(
    path: str | Path,
    known_ids: AbstractSet[str],
    *,
    label: str = "crosswalk",
) -> Crosswalk:
    """Load a two-column crosswalk, keeping rows whose network id is in ``known_ids``.

    Parameters
    ----------
    path:
        CSV whose first line is a header. Field 0 is the external id and field 1
        the network id; further fields are ignored.
    known_ids:
        Network ids present in the road network index (way ids for segments,
        node ids for junctions).
    label:
        Name used in log messages.

    Returns
    -------
    Crosswalk
        Later rows overwrite earlier rows with the same external id. Rows with
        an unknown network id, including rows too short to carry one, are
        counted in ``dropped``.
    """
    entries: Dict[str, str] = {}
    dropped = 0
    short_rows = 0
    with Path(path).open("r", encoding="utf-8", newline="") as handle:
        reader = csv.reader(handle, quoting=csv.QUOTE_NONE)
        next(reader, None)
        for row in reader:
            if not row or not any(field.strip() for field in row):
                continue
            external_id = row[0].strip()
            if len(row) < 2:
                short_rows += 1
                network_id = ""
            else:
                network_id = row[1].strip()
            if network_id in known_ids:
                entries[external_id] = network_id
            else:
                dropped += 1

    crosswalk = Crosswalk(entries, label=label, dropped=dropped, short_rows=short_rows)
    logger.info(
        "Loaded %d %s entries from %s (%d dropped as unknown to the network index)",
        crosswalk.admitted,
        label,
        path,
        dropped,
    )
    if short_rows:
        logger.warning("%d %s rows in %s had fewer than 2 fields", short_rows, label, path)
    return crosswalk


__all__ = ["Crosswalk", "load_crosswalk"]
