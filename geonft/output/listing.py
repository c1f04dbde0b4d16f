# geonft/output/listing.py
from __future__ import annotations

import sys
from typing import Iterable, Literal, Optional, TextIO

from geonft.models import GeoRecord
from geonft.processing.interval import Interval

FormatType = Literal["range", "cidr"]


def format_interval(interval: Interval) -> str:
    return f"{interval.lower} - {interval.upper}"


def write_intervals(
        intervals: Iterable[Optional[Interval]],
        stream: Optional[TextIO] = None,
        fmt: FormatType = "range",
) -> int:
    """
    Print intervals, one per line.

    ``range`` prints ``<lower> - <upper>`` (upper excluded); ``cidr`` prints
    the CIDR blocks covering each interval instead.
    """
    stream = stream or sys.stdout
    count = 0
    for interval in intervals:
        if interval is None:
            continue
        if fmt == "cidr":
            for network in interval.to_networks():
                stream.write(f"{network}\n")
        else:
            stream.write(format_interval(interval) + "\n")
        count += 1
    return count


def write_networks(records: Iterable[GeoRecord], stream: Optional[TextIO] = None) -> int:
    stream = stream or sys.stdout
    count = 0
    for record in records:
        stream.write(f"{record.network}\n")
        count += 1
    return count
