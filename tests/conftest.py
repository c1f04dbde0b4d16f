from __future__ import annotations

import pytest

from geonft.processing.interval import Interval


@pytest.fixture
def cidr():
    """Build an Interval from a CIDR, failing the test if it is rejected."""
    def _build(value: str) -> Interval:
        interval = Interval.from_cidr(value)
        assert interval is not None, f"{value} should form an interval"
        return interval
    return _build


GEOFEED = """\
# prefix,country,region,city,postal
10.0.0.0/8,IT,IT-RM,Rome,00100
10.0.0.0/16,IT,,,
11.0.0.0/16,it,,,
192.168.11.12/32,IT,,,
2001:db8::/32,IT,,,
20.0.0.0/8,FR,,,
"""


@pytest.fixture
def geofeed_path(tmp_path):
    path = tmp_path / "geofeed.csv"
    path.write_text(GEOFEED)
    return path
