# geonft/datasources/maxmind_csv.py
from __future__ import annotations

from pathlib import Path
from typing import Iterator, Optional

import pandas as pd

from geonft.config import (
    MAXMIND_BLOCKS_IPV4_GLOB,
    MAXMIND_BLOCKS_IPV6_GLOB,
    MAXMIND_LOCATIONS_GLOB,
)
from geonft.datasources.base import GeoRangeSource
from geonft.errors import SourceError
from geonft.models import GeoRecord
from geonft.utils.logging import get_logger

log = get_logger(__name__)


def _find_one(folder: Path, pattern: str, required: bool = True) -> Optional[Path]:
    matches = sorted(folder.glob(pattern))
    if not matches:
        if required:
            raise SourceError(f"no file matching {pattern} in {folder}")
        return None
    if len(matches) > 1:
        log.warning("Several files match %s in %s, using %s", pattern, folder, matches[0])
    return matches[0]


def _read_csv(path: Path, usecols: list[str]) -> pd.DataFrame:
    try:
        return pd.read_csv(path, usecols=usecols, dtype=str)
    except (OSError, ValueError) as e:
        raise SourceError(f"cannot read {path}: {e}") from e


class MaxMindCsvSource(GeoRangeSource):
    """
    GeoLite2/GeoIP2 Country CSV snapshot folder.

    Blocks files carry ``network`` and ``geoname_id``; the locations file maps
    ``geoname_id`` to ``country_iso_code``. Blocks without a ``geoname_id``
    fall back to their ``registered_country_geoname_id``.
    """

    name = "MaxMindCSV"

    def __init__(self, folder: Path):
        self.folder = Path(folder).expanduser()
        if not self.folder.is_dir():
            raise SourceError(f"{self.folder} is not a directory")

    def _locations(self) -> pd.Series:
        path = _find_one(self.folder, MAXMIND_LOCATIONS_GLOB)
        df = _read_csv(path, ["geoname_id", "country_iso_code"])
        df = df.dropna(subset=["geoname_id", "country_iso_code"])
        return df.set_index("geoname_id")["country_iso_code"].str.upper()

    def _blocks(self, path: Path, locations: pd.Series) -> pd.DataFrame:
        df = _read_csv(path, ["network", "geoname_id", "registered_country_geoname_id"])
        geoname = df["geoname_id"].fillna(df["registered_country_geoname_id"])
        df["country"] = geoname.map(locations)
        log.info("Loaded %d blocks from %s", len(df), path.name)
        return df.dropna(subset=["network", "country"])

    def __iter__(self) -> Iterator[GeoRecord]:
        locations = self._locations()
        paths = [
            _find_one(self.folder, MAXMIND_BLOCKS_IPV4_GLOB),
            _find_one(self.folder, MAXMIND_BLOCKS_IPV6_GLOB, required=False),
        ]
        for path in paths:
            if path is None:
                continue
            df = self._blocks(path, locations)
            for network, country in zip(df["network"], df["country"]):
                yield GeoRecord(network=network, country=country, source=self.name)
