# geonft/datasources/geofeed_csv.py
from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pandas as pd

from geonft.datasources.base import GeoRangeSource
from geonft.errors import SourceError
from geonft.models import GeoRecord
from geonft.utils.logging import get_logger

log = get_logger(__name__)

GEOFEED_COLUMNS = ["prefix", "country", "region", "city", "postal"]


class GeofeedCsvSource(GeoRangeSource):
    """
    RFC 8805 geofeed: ``prefix,country,region,city,postal`` with ``#`` comments.
    """

    name = "Geofeed"

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()

    def _read(self) -> pd.DataFrame:
        try:
            df = pd.read_csv(
                self.path,
                header=None,
                names=GEOFEED_COLUMNS,
                usecols=["prefix", "country"],
                comment="#",
                dtype=str,
                skip_blank_lines=True,
                skipinitialspace=True,
            )
        except (OSError, pd.errors.ParserError) as e:
            raise SourceError(f"cannot read geofeed {self.path}: {e}") from e
        except pd.errors.EmptyDataError:
            log.warning("Geofeed %s is empty", self.path)
            return pd.DataFrame(columns=GEOFEED_COLUMNS[:2])

        df = df.dropna(subset=["prefix"])
        df["prefix"] = df["prefix"].str.strip()
        df["country"] = df["country"].fillna("").str.strip().str.upper()
        log.info("Loaded %d geofeed rows from %s", len(df), self.path)
        return df

    def __iter__(self) -> Iterator[GeoRecord]:
        df = self._read()
        for prefix, country in zip(df["prefix"], df["country"]):
            if not country:
                continue
            yield GeoRecord(network=prefix, country=country, source=self.name)
