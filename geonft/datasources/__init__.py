# geonft/datasources/__init__.py
from __future__ import annotations

from pathlib import Path

from geonft.datasources.base import GeoRangeSource, iter_country_networks
from geonft.datasources.geofeed_csv import GeofeedCsvSource
from geonft.datasources.maxmind_csv import MaxMindCsvSource
from geonft.datasources.maxminddb_source import MaxMindDbSource

__all__ = [
    "GeoRangeSource",
    "GeofeedCsvSource",
    "MaxMindCsvSource",
    "MaxMindDbSource",
    "iter_country_networks",
    "open_source",
]


def open_source(path: Path, kind: str = "mmdb") -> GeoRangeSource:
    """Instantiate the datasource matching ``kind``."""
    if kind == "mmdb":
        return MaxMindDbSource(path=path)
    if kind == "maxmind":
        return MaxMindCsvSource(folder=path)
    if kind == "geofeed":
        return GeofeedCsvSource(path=path)
    raise ValueError(f"Unsupported kind: {kind}")
