# geonft/processing/interval.py
"""
Half-open IPv4 ranges built from CIDR strings.

Subnets described by CIDR and masks rarely line up: a GeoIP database often
needs a handful of /22s, /21s and /24s to describe what is really a single
contiguous range. Lookups don't care, but a firewall set does. Converting
every subnet into an integer interval ``[lower, upper)`` makes joining them
a matter of comparing numbers, whatever their alignment. The half-open form
is also how nftables stores interval set elements.
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Optional

from geonft.errors import DisjointIntervalsError
from geonft.processing.address import (
    Address,
    broadcast_bytes,
    is_zeros,
    netmask_bytes,
)


@dataclass(frozen=True)
class Interval:
    lower: Address  # included
    upper: Address  # excluded

    def __post_init__(self) -> None:
        if self.lower.value >= self.upper.value:
            raise ValueError(
                f"interval lower bound {self.lower} must be below upper bound {self.upper}"
            )

    @classmethod
    def from_cidr(cls, cidr: str) -> Optional["Interval"]:
        """
        Build the interval covered by an IPv4 CIDR, e.g. 10.0.0.0/8 gives
        [10.0.0.0, 11.0.0.0).

        Returns None for anything that cannot bound a range: unparsable or
        non-IPv4 strings, /32 host routes, the all-zero network, and the
        topmost subnet whose broadcast address has no successor.
        """
        try:
            iface = ipaddress.ip_interface(cidr.strip())
        except (ValueError, AttributeError):
            return None
        if iface.version != 4:
            return None

        subnet = iface.network
        mask = netmask_bytes(subnet.prefixlen)
        if subnet.prefixlen == 32:
            return None

        host = iface.ip
        if host is None or is_zeros(host.packed):
            return None

        network = Address.from_host_address(subnet.network_address)
        if network is None or not network.valid:
            return None

        broadcast = Address.from_packed(broadcast_bytes(network.packed, mask))
        if not broadcast.valid:
            return None

        upper = broadcast.successor()
        if upper is None or not upper.valid:
            return None

        return cls(lower=network, upper=upper)

    @property
    def lower_ip(self) -> ipaddress.IPv4Address:
        return self.lower.to_ip()

    @property
    def upper_ip(self) -> ipaddress.IPv4Address:
        return self.upper.to_ip()

    @property
    def last_ip(self) -> ipaddress.IPv4Address:
        """Highest address actually inside the interval."""
        return ipaddress.IPv4Address(self.upper.value - 1)

    @property
    def num_addresses(self) -> int:
        return self.upper.value - self.lower.value

    def to_networks(self) -> list[ipaddress.IPv4Network]:
        """Smallest list of CIDR blocks covering exactly this interval."""
        return list(ipaddress.summarize_address_range(self.lower_ip, self.last_ip))

    def __str__(self) -> str:
        return f"{self.lower} - {self.upper}"


def can_join(a: Interval, b: Interval) -> bool:
    """
    True when ``a`` and ``b`` overlap or touch, so that their union is a
    single contiguous range.

    The two cases cover both orderings of the lower bounds, which makes the
    test symmetric.
    """
    a_lower, a_upper = a.lower.value, a.upper.value
    b_lower, b_upper = b.lower.value, b.upper.value
    # a reaches into the start of b
    if a_lower <= b_lower and a_upper >= b_lower:
        return True
    # a starts inside b
    if a_lower <= b_upper and a_lower >= b_lower:
        return True
    return False


def join(a: Interval, b: Interval) -> Interval:
    """Union of two joinable intervals, as a new Interval."""
    if not can_join(a, b):
        raise DisjointIntervalsError(f"cannot join disjoint intervals {a} and {b}")
    lower = a.lower if a.lower.value <= b.lower.value else b.lower
    upper = a.upper if a.upper.value >= b.upper.value else b.upper
    return Interval(lower=lower, upper=upper)
