import json
import subprocess

import pytest

from geonft.errors import NftError, SetNotFoundError
from geonft.sinks.nftables import (
    NftSetLoader,
    SetElement,
    add_to_set,
    interval_elements,
    render_elements,
)

TABLES = {
    "nftables": [
        {"metainfo": {"version": "1.0.9", "json_schema_version": 1}},
        {"table": {"family": "inet", "name": "Filter", "handle": 1}},
        {"table": {"family": "ip", "name": "nat", "handle": 2}},
    ]
}


class FakeNft:
    """Records nft invocations and answers the few we use."""

    def __init__(self, sets=("blocked4",), fail_add=False):
        self.sets = set(sets)
        self.fail_add = fail_add
        self.calls = []

    def __call__(self, cmd, input=None, capture_output=False, text=False, check=False):
        self.calls.append((cmd, input))
        args = cmd[1:]
        if args == ["-j", "list", "tables"]:
            return subprocess.CompletedProcess(cmd, 0, json.dumps(TABLES), "")
        if args[:3] == ["-j", "list", "set"]:
            if args[-1] in self.sets:
                return subprocess.CompletedProcess(cmd, 0, "{}", "")
            return subprocess.CompletedProcess(cmd, 1, "", "Error: No such file or directory")
        if args == ["-f", "-"]:
            if self.fail_add:
                return subprocess.CompletedProcess(cmd, 1, "", "Error: Could not process rule")
            return subprocess.CompletedProcess(cmd, 0, "", "")
        raise AssertionError(f"unexpected nft call {cmd}")

    @property
    def scripts(self):
        return [stdin for cmd, stdin in self.calls if cmd[1:] == ["-f", "-"]]


def test_interval_elements(cidr):
    elements = interval_elements([cidr("10.0.0.0/8"), None])
    assert elements == [
        SetElement(key=bytes([10, 0, 0, 0])),
        SetElement(key=bytes([11, 0, 0, 0]), interval_end=True),
    ]


def test_render_elements_uses_inclusive_last_address(cidr):
    elements = interval_elements([cidr("10.0.0.0/8"), cidr("192.168.0.0/31")])
    assert render_elements(elements) == [
        "10.0.0.0-10.255.255.255",
        "192.168.0.0-192.168.0.1",
    ]


def test_render_elements_rejects_unpaired():
    with pytest.raises(ValueError):
        render_elements([SetElement(key=b"\x0a\x00\x00\x00")])
    with pytest.raises(ValueError):
        render_elements([
            SetElement(key=b"\x0a\x00\x00\x00", interval_end=True),
            SetElement(key=b"\x0b\x00\x00\x00"),
        ])


def test_find_set_matches_table_case_insensitively():
    nft = FakeNft()
    loader = NftSetLoader("filter", "blocked4", runner=nft)
    assert loader.find_set() == ("inet", "Filter")
    assert nft.calls[1][0] == ["nft", "-j", "list", "set", "inet", "Filter", "blocked4"]


def test_find_set_missing_table():
    loader = NftSetLoader("raw", "blocked4", runner=FakeNft())
    with pytest.raises(SetNotFoundError, match="could not find a set named 'blocked4' in table 'raw'"):
        loader.find_set()


def test_find_set_missing_set():
    loader = NftSetLoader("filter", "nope", runner=FakeNft())
    with pytest.raises(SetNotFoundError):
        loader.find_set()


def test_load_submits_batches_in_order(cidr):
    nft = FakeNft()
    loader = NftSetLoader("filter", "blocked4", batch_size=4, runner=nft)
    intervals = [cidr("10.0.0.0/8"), cidr("20.0.0.0/8"), cidr("30.0.0.0/8")]
    assert loader.load(intervals) == 6
    assert nft.scripts == [
        "add element inet Filter blocked4 { 10.0.0.0-10.255.255.255, 20.0.0.0-20.255.255.255 }\n",
        "add element inet Filter blocked4 { 30.0.0.0-30.255.255.255 }\n",
    ]


def test_load_default_batch_size(cidr):
    nft = FakeNft()
    intervals = [cidr(f"10.{i // 256}.{i % 256}.0/24") for i in range(0, 1200, 2)]
    add_to_set("filter", "blocked4", intervals, runner=nft)
    # 600 intervals -> 1200 elements -> batches of 1000 and 200
    assert [s.count("-") for s in nft.scripts] == [500, 100]


def test_load_without_intervals_sends_nothing():
    nft = FakeNft()
    assert add_to_set("filter", "blocked4", [], runner=nft) == 0
    assert nft.scripts == []


def test_load_failure_is_fatal(cidr):
    loader = NftSetLoader("filter", "blocked4", runner=FakeNft(fail_add=True))
    with pytest.raises(NftError, match="Could not process rule"):
        loader.load([cidr("10.0.0.0/8")])


def test_missing_nft_binary(cidr):
    def runner(cmd, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", cmd[0])

    loader = NftSetLoader("filter", "blocked4", nft="/nonexistent/nft", runner=runner)
    with pytest.raises(NftError):
        loader.find_set()


@pytest.mark.parametrize("batch_size", [0, 1, 999])
def test_batch_size_must_be_even(batch_size):
    with pytest.raises(ValueError):
        NftSetLoader("filter", "blocked4", batch_size=batch_size)
