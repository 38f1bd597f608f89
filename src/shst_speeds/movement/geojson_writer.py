"""Incremental writer for a single GeoJSON FeatureCollection document."""

from __future__ import annotations

import contextlib
import json
import logging
import math
from pathlib import Path
from typing import Iterator, Mapping, TextIO

logger = logging.getLogger(__name__)

OPENING = '{"type": "FeatureCollection", "features": [\n'
CLOSING = "]}\n"


def _json_safe(value: object) -> object:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, Mapping):
        return {key: _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    return value


class FeatureCollectionWriter:
    """Streams features into ``{"type": "FeatureCollection", "features": [...]}``.

    Every feature after the first is preceded by exactly one comma. The opening
    and closing fragments are each written once. Non-finite property values are
    written as ``null`` so the document stays valid JSON.
    """

    def __init__(self, handle: TextIO):
        self._handle = handle
        self._opened = False
        self._closed = False
        self.features_written = 0

    def open(self) -> None:
        if self._opened:
            raise RuntimeError("FeatureCollection already opened")
        self._handle.write(OPENING)
        self._opened = True

    def write_feature(self, feature: Mapping[str, object]) -> None:
        if not self._opened or self._closed:
            raise RuntimeError("FeatureCollection is not open for writing")
        payload = dict(feature)
        if "properties" in payload:
            payload["properties"] = _json_safe(payload["properties"])
        text = json.dumps(payload, allow_nan=False)
        if self.features_written:
            self._handle.write(",")
        self._handle.write(text + "\n")
        self.features_written += 1

    def close(self) -> None:
        if not self._opened:
            raise RuntimeError("FeatureCollection was never opened")
        if self._closed:
            return
        self._handle.write(CLOSING)
        self._handle.flush()
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "FeatureCollectionWriter":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
        else:
            self._handle.flush()


@contextlib.contextmanager
def open_feature_collection(path: str | Path) -> Iterator[FeatureCollectionWriter]:
    """Create ``path`` (and its parent directory) and yield an opened writer."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as handle:
        with FeatureCollectionWriter(handle) as writer:
            yield writer
        logger.debug("Wrote %d features to %s", writer.features_written, output_path)


__all__ = ["CLOSING", "OPENING", "FeatureCollectionWriter", "open_feature_collection"]
