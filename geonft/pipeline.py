# geonft/pipeline.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from geonft.datasources.base import iter_country_networks, normalize_countries
from geonft.models import GeoRecord
from geonft.processing.interval import Interval
from geonft.processing.merge import IntervalCollection, MergeStrategy, sweep_merge
from geonft.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class CollectStats:
    matched: int = 0
    discarded: int = 0
    intervals: int = 0


def collect_intervals(
        records: Iterable[GeoRecord],
        countries: Iterable[str],
        strategy: MergeStrategy = MergeStrategy.SWEEP,
        stats: CollectStats | None = None,
) -> list[Interval]:
    """
    Stream ``records`` once and return the merged IPv4 intervals of
    ``countries``.

    CIDRs that cannot form an interval (host routes, the zero network,
    unparsable strings) are dropped without complaint.
    """
    strategy = MergeStrategy(strategy)
    countries = normalize_countries(countries)
    stats = stats if stats is not None else CollectStats()

    candidates: list[Interval] = []
    collection = IntervalCollection(cascade=strategy is MergeStrategy.CASCADE)
    per_country = dict.fromkeys(sorted(countries), 0)

    for record in iter_country_networks(records, countries, family=4):
        stats.matched += 1
        per_country[record.country] += 1
        new = Interval.from_cidr(record.network)
        if new is None:
            stats.discarded += 1
            log.debug("subnet %s discarded", record.network)
            continue
        if strategy is MergeStrategy.SWEEP:
            candidates.append(new)
        else:
            present = collection.insert(new)
            if present is not new:
                log.debug("subnet %s merged into %s", record.network, present)

    result = sweep_merge(candidates) if strategy is MergeStrategy.SWEEP else collection.intervals
    stats.intervals = len(result)

    for country, count in per_country.items():
        if not count:
            log.debug("no IPv4 ranges found for %s", country)
    log.info(
        "Matched %d subnets for %s (%d discarded), merged into %d intervals (%s)",
        stats.matched, ", ".join(per_country) or "-", stats.discarded,
        stats.intervals, strategy.value,
    )
    return result
