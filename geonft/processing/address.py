# geonft/processing/address.py
"""
IPv4 addresses as 32-bit ordinals.

Ranges are much simpler to compare and join as integers than as byte
strings, so every address carries both forms: the ordinal for arithmetic
and the packed 4-byte big-endian form for the firewall and for display.
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from typing import Optional, Union

from geonft.errors import AddressConversionError

SIZE = 4
MAX_VALUE = 2 ** 32 - 1
FULL_MASK = b"\xff" * SIZE

HostAddress = Union[str, bytes, ipaddress.IPv4Address, ipaddress.IPv6Address]


def packed_to_int(packed: bytes) -> int:
    if len(packed) != SIZE:
        raise AddressConversionError(
            f"expected {SIZE} bytes for an IPv4 address, got {len(packed)}"
        )
    return int.from_bytes(packed, "big")


def int_to_packed(value: int) -> bytes:
    if not 0 <= value <= MAX_VALUE:
        raise AddressConversionError(f"{value} does not fit in an IPv4 address")
    return value.to_bytes(SIZE, "big")


def netmask_bytes(prefixlen: int) -> bytes:
    """Network mask for a prefix length, e.g. 20 -> ff.ff.f0.00."""
    if not 0 <= prefixlen <= 32:
        raise ValueError(f"invalid IPv4 prefix length: {prefixlen}")
    return int_to_packed((MAX_VALUE << (32 - prefixlen)) & MAX_VALUE)


def hostmask_bytes(netmask: bytes) -> bytes:
    # The host bits are the ones NOT in the netmask.
    return bytes(~b & 0xFF for b in netmask)


def broadcast_bytes(network: bytes, netmask: bytes) -> bytes:
    """Network address with every host bit set."""
    return bytes(n | h for n, h in zip(network, hostmask_bytes(netmask)))


def is_zeros(packed: bytes) -> bool:
    return not any(packed)


@dataclass(frozen=True, order=True)
class Address:
    value: int
    packed: bytes = field(compare=False)

    @classmethod
    def from_int(cls, value: int) -> "Address":
        return cls(value=value, packed=int_to_packed(value))

    @classmethod
    def from_packed(cls, packed: bytes) -> "Address":
        return cls(value=packed_to_int(packed), packed=bytes(packed))

    @classmethod
    def from_host_address(cls, ip: HostAddress) -> Optional["Address"]:
        """
        Build an Address from an IPv4 host address.

        Returns None when ``ip`` is not an IPv4 address. The result can still
        be invalid (0.0.0.0); check ``valid`` before using it.
        """
        if isinstance(ip, (bytes, bytearray)):
            if len(ip) != SIZE:
                return None
            return cls.from_packed(bytes(ip))

        if isinstance(ip, str):
            try:
                ip = ipaddress.ip_address(ip.strip())
            except ValueError:
                return None

        if isinstance(ip, ipaddress.IPv6Address):
            ip = ip.ipv4_mapped
        if not isinstance(ip, ipaddress.IPv4Address):
            return None
        return cls.from_packed(ip.packed)

    @property
    def valid(self) -> bool:
        """
        Whether this address may bound an interval. 0.0.0.0 never does.
        """
        if len(self.packed) != SIZE:
            return False
        if is_zeros(self.packed):
            return False
        if self.value == 0:
            return False
        return True

    def successor(self) -> Optional["Address"]:
        """Next address, or None at the top of the address space."""
        if not self.valid or self.value >= MAX_VALUE:
            return None
        return Address.from_int(self.value + 1)

    def to_ip(self) -> ipaddress.IPv4Address:
        return ipaddress.IPv4Address(self.packed)

    def __str__(self) -> str:
        return str(self.to_ip())
