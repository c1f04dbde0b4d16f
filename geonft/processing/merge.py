# geonft/processing/merge.py
from __future__ import annotations

from enum import Enum
from typing import Iterable, Iterator, Optional

from geonft.processing.interval import Interval, can_join, join
from geonft.utils.logging import get_logger

log = get_logger(__name__)


class MergeStrategy(str, Enum):
    SWEEP = "sweep"
    INCREMENTAL = "incremental"
    CASCADE = "cascade"


class IntervalCollection:
    """
    Growing list of intervals, merged as they are inserted.

    Each insertion scans the list in order and joins the new interval into
    the first entry it overlaps or touches. With ``cascade=False`` that is
    the only join performed, so an interval bridging two existing entries
    leaves them apart. With ``cascade=True`` the joined interval is taken
    out and inserted again until nothing else joins.
    """

    def __init__(self, intervals: Optional[Iterable[Interval]] = None, cascade: bool = False):
        self.cascade = cascade
        self._intervals: list[Interval] = []
        for interval in intervals or ():
            self.insert(interval)

    def insert(self, new: Interval) -> Interval:
        """Insert ``new`` and return the entry that now contains it."""
        while True:
            for i, present in enumerate(self._intervals):
                if can_join(new, present):
                    merged = join(new, present)
                    log.debug("interval %s merged into %s", new, merged)
                    if not self.cascade:
                        self._intervals[i] = merged
                        return merged
                    del self._intervals[i]
                    new = merged
                    break
            else:
                self._intervals.append(new)
                return new

    @property
    def intervals(self) -> list[Interval]:
        return list(self._intervals)

    def __iter__(self) -> Iterator[Interval]:
        return iter(list(self._intervals))

    def __len__(self) -> int:
        return len(self._intervals)


def sweep_merge(intervals: Iterable[Interval]) -> list[Interval]:
    """
    Sort by lower bound, then merge left to right.

    The result is sorted, and no two entries overlap or touch.
    """
    merged: list[Interval] = []
    for interval in sorted(intervals, key=lambda i: (i.lower.value, i.upper.value)):
        if merged and interval.lower.value <= merged[-1].upper.value:
            merged[-1] = join(merged[-1], interval)
        else:
            merged.append(interval)
    return merged


def merge_intervals(
        intervals: Iterable[Interval],
        strategy: MergeStrategy = MergeStrategy.SWEEP,
) -> list[Interval]:
    strategy = MergeStrategy(strategy)
    if strategy is MergeStrategy.SWEEP:
        return sweep_merge(intervals)
    collection = IntervalCollection(cascade=strategy is MergeStrategy.CASCADE)
    for interval in intervals:
        collection.insert(interval)
    return collection.intervals
