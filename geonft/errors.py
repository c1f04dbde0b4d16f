# geonft/errors.py
from __future__ import annotations


class GeonftError(Exception):
    """Base class for every fatal error raised by geonft."""


class SourceError(GeonftError):
    """The geo-range database could not be opened or iterated."""


class SinkError(GeonftError):
    """The firewall address set could not be populated."""


class SetNotFoundError(SinkError):
    def __init__(self, table: str, set_name: str):
        self.table = table
        self.set_name = set_name
        super().__init__(
            f"could not find a set named {set_name!r} in table {table!r}"
        )


class NftError(SinkError):
    def __init__(self, command: list[str], returncode: int, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr.strip()
        msg = f"{' '.join(command)} exited with status {returncode}"
        if self.stderr:
            msg = f"{msg}: {self.stderr}"
        super().__init__(msg)


class AddressConversionError(GeonftError):
    """Integer/byte conversion of an address failed (invariant violation)."""


class DisjointIntervalsError(GeonftError, ValueError):
    """Two intervals neither overlap nor touch, so they cannot be joined."""
