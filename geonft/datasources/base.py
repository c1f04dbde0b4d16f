# geonft/datasources/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Iterator, Optional

from geonft.models import GeoRecord
from geonft.utils.logging import get_logger

log = get_logger(__name__)


class GeoRangeSource(ABC):
    """
    A full-scan iterator over (CIDR, country) pairs.

    Subclasses open their backing file lazily or in ``__init__`` and raise
    ``SourceError`` for anything that stops the scan: a database that cannot
    be opened, or a failure halfway through iteration.
    """

    name: str = "source"

    @abstractmethod
    def __iter__(self) -> Iterator[GeoRecord]:
        ...

    def close(self) -> None:
        pass

    def __enter__(self) -> "GeoRangeSource":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def normalize_countries(countries: Iterable[str]) -> set[str]:
    return {c.strip().upper() for c in countries if c and c.strip()}


def iter_country_networks(
        records: Iterable[GeoRecord],
        countries: Iterable[str],
        family: Optional[int] = 4,
) -> Iterator[GeoRecord]:
    """
    Yield the records tagged with one of ``countries``, in database order.

    ``family`` restricts the address family (4 or 6); None keeps both.
    """
    wanted = normalize_countries(countries)
    for record in records:
        if record.country not in wanted:
            continue
        if family is not None and record.version != family:
            continue
        log.debug("subnet %s assigned to %s", record.network, record.country)
        yield record
