# geonft/datasources/maxminddb_source.py
from __future__ import annotations

from pathlib import Path
from typing import Iterator, Optional

import maxminddb

from geonft.datasources.base import GeoRangeSource
from geonft.errors import SourceError
from geonft.models import GeoRecord
from geonft.utils.logging import get_logger

log = get_logger(__name__)


def country_code(data: Optional[dict]) -> Optional[str]:
    """ISO code of the ``country`` entry of a GeoIP2/GeoLite2 Country record."""
    if not data:
        return None
    country = data.get("country") or {}
    code = country.get("iso_code")
    return code.upper() if code else None


class MaxMindDbSource(GeoRangeSource):
    """
    Every network of a MaxMind DB file (GeoLite2/GeoIP2 Country, DB-IP lite),
    walked front to back.
    """

    name = "MaxMindDB"

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()
        try:
            self.reader = maxminddb.open_database(str(self.path))
        except (OSError, ValueError, maxminddb.InvalidDatabaseError) as e:
            raise SourceError(f"cannot open MaxMind DB {self.path}: {e}") from e
        meta = self.reader.metadata()
        log.info(
            "Opened %s (%s, IPv%d, %d nodes)",
            self.path, meta.database_type, meta.ip_version, meta.node_count,
        )

    def __iter__(self) -> Iterator[GeoRecord]:
        try:
            for network, data in self.reader:
                code = country_code(data)
                if not code:
                    continue
                yield GeoRecord(network=str(network), country=code, source=self.name)
        except maxminddb.InvalidDatabaseError as e:
            raise SourceError(f"error iterating {self.path}: {e}") from e

    def close(self) -> None:
        self.reader.close()
