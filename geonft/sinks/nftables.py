# geonft/sinks/nftables.py
"""
Loading intervals into an existing nftables set.

An interval set element is a pair: the range start key, and the range end
key flagged as the (exclusive) interval end. The ``nft`` command line writes
the same range as ``first-last`` with an inclusive last address, so each pair
is rendered that way when the batch is submitted.

Elements go in batches of ``batch_size``, one ``nft -f -`` transaction per
batch, each one finished before the next starts.
"""

from __future__ import annotations

import ipaddress
import json
import subprocess
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence

from geonft.config import BATCH_SIZE, DEFAULT_NFT
from geonft.errors import NftError, SetNotFoundError
from geonft.processing.interval import Interval
from geonft.utils.logging import get_logger

log = get_logger(__name__)

Runner = Callable[..., subprocess.CompletedProcess]


@dataclass(frozen=True)
class SetElement:
    key: bytes
    interval_end: bool = False


def interval_elements(intervals: Iterable[Optional[Interval]]) -> list[SetElement]:
    elements: list[SetElement] = []
    for interval in intervals:
        if interval is None:
            continue
        elements.append(SetElement(key=interval.lower.packed))
        elements.append(SetElement(key=interval.upper.packed, interval_end=True))
    return elements


def render_elements(elements: Sequence[SetElement]) -> list[str]:
    """Pair start/end elements into nft ``first-last`` range expressions."""
    if len(elements) % 2:
        raise ValueError("interval elements must come in start/end pairs")
    ranges = []
    for start, end in zip(elements[::2], elements[1::2]):
        if start.interval_end or not end.interval_end:
            raise ValueError("interval elements must come in start/end pairs")
        first = ipaddress.IPv4Address(start.key)
        last = ipaddress.IPv4Address(int.from_bytes(end.key, "big") - 1)
        ranges.append(f"{first}-{last}")
    return ranges


class NftSetLoader:
    def __init__(
            self,
            table: str,
            set_name: str,
            nft: str = DEFAULT_NFT,
            batch_size: int = BATCH_SIZE,
            runner: Runner = subprocess.run,
    ):
        if batch_size < 2 or batch_size % 2:
            raise ValueError(f"batch size must be an even number >= 2, got {batch_size}")
        self.table = table
        self.set_name = set_name
        self.nft = nft
        self.batch_size = batch_size
        self.runner = runner
        # resolved by find_set()
        self.family: Optional[str] = None
        self.table_name: Optional[str] = None

    def _run(self, args: list[str], stdin: Optional[str] = None) -> str:
        cmd = [self.nft, *args]
        try:
            proc = self.runner(
                cmd,
                input=stdin,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise NftError(cmd, -1, str(e)) from e
        if proc.returncode != 0:
            raise NftError(cmd, proc.returncode, proc.stderr or "")
        return proc.stdout or ""

    def _list_tables(self) -> list[dict]:
        out = self._run(["-j", "list", "tables"])
        try:
            doc = json.loads(out or "{}")
        except json.JSONDecodeError as e:
            raise NftError([self.nft, "-j", "list", "tables"], 0, f"invalid JSON: {e}") from e
        return [item["table"] for item in doc.get("nftables", []) if "table" in item]

    def find_set(self) -> tuple[str, str]:
        """Locate the target table (case-insensitively) and check the set exists."""
        for table in self._list_tables():
            if table.get("name", "").lower() == self.table.lower():
                self.family = table["family"]
                self.table_name = table["name"]
                break
        else:
            raise SetNotFoundError(self.table, self.set_name)

        try:
            self._run(["-j", "list", "set", self.family, self.table_name, self.set_name])
        except NftError as e:
            raise SetNotFoundError(self.table, self.set_name) from e
        log.info("Found set @%s in %s table %s", self.set_name, self.family, self.table_name)
        return self.family, self.table_name

    def batches(self, elements: Sequence[SetElement]) -> Iterable[tuple[int, int]]:
        for start in range(0, len(elements), self.batch_size):
            yield start, min(start + self.batch_size, len(elements))

    def load(self, intervals: Iterable[Optional[Interval]]) -> int:
        """Add every interval to the set; return the number of elements sent."""
        if self.family is None:
            self.find_set()
        elements = interval_elements(intervals)

        for start, end in self.batches(elements):
            log.debug(
                "Adding elements from %d to %d to @%s", start, end, self.set_name,
            )
            ranges = render_elements(elements[start:end])
            script = "add element {} {} {} {{ {} }}\n".format(
                self.family, self.table_name, self.set_name, ", ".join(ranges),
            )
            self._run(["-f", "-"], stdin=script)

        log.info("Added %d intervals to @%s", len(elements) // 2, self.set_name)
        return len(elements)


def add_to_set(
        table: str,
        set_name: str,
        intervals: Iterable[Optional[Interval]],
        **kwargs,
) -> int:
    loader = NftSetLoader(table, set_name, **kwargs)
    loader.find_set()
    return loader.load(intervals)
