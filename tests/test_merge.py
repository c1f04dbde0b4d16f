import pytest

from geonft.processing.merge import (
    IntervalCollection,
    MergeStrategy,
    merge_intervals,
    sweep_merge,
)


def _strs(intervals):
    return [str(i) for i in intervals]


def test_insert_appends_disjoint(cidr):
    collection = IntervalCollection()
    collection.insert(cidr("10.0.0.0/8"))
    collection.insert(cidr("20.0.0.0/8"))
    assert _strs(collection) == ["10.0.0.0 - 11.0.0.0", "20.0.0.0 - 21.0.0.0"]
    assert len(collection) == 2


def test_insert_replaces_in_place(cidr):
    collection = IntervalCollection([cidr("10.0.0.0/16"), cidr("20.0.0.0/8")])
    merged = collection.insert(cidr("10.0.0.0/8"))
    assert str(merged) == "10.0.0.0 - 11.0.0.0"
    assert _strs(collection) == ["10.0.0.0 - 11.0.0.0", "20.0.0.0 - 21.0.0.0"]


def test_insert_contained_interval(cidr):
    collection = IntervalCollection()
    collection.insert(cidr("10.0.0.0/8"))
    collection.insert(cidr("10.0.0.0/16"))
    assert _strs(collection) == ["10.0.0.0 - 11.0.0.0"]


def test_incremental_joins_once_per_insert(cidr):
    collection = IntervalCollection([cidr("1.0.0.0/24"), cidr("1.0.2.0/24")])
    collection.insert(cidr("1.0.1.0/24"))
    # the bridging subnet only joins the first entry
    assert _strs(collection) == ["1.0.0.0 - 1.0.2.0", "1.0.2.0 - 1.0.3.0"]


def test_cascade_joins_bridged_entries(cidr):
    collection = IntervalCollection(
        [cidr("1.0.0.0/24"), cidr("1.0.2.0/24"), cidr("5.0.0.0/8")], cascade=True
    )
    collection.insert(cidr("1.0.1.0/24"))
    assert sorted(_strs(collection)) == ["1.0.0.0 - 1.0.3.0", "5.0.0.0 - 6.0.0.0"]


def test_intervals_returns_a_copy(cidr):
    collection = IntervalCollection([cidr("10.0.0.0/8")])
    snapshot = collection.intervals
    snapshot.clear()
    assert len(collection) == 1


def test_sweep_merge(cidr):
    intervals = [
        cidr("1.0.2.0/24"),
        cidr("5.0.0.0/8"),
        cidr("1.0.0.0/24"),
        cidr("1.0.1.0/24"),
        cidr("5.1.0.0/16"),
        cidr("7.0.0.0/8"),
    ]
    assert _strs(sweep_merge(intervals)) == [
        "1.0.0.0 - 1.0.3.0",
        "5.0.0.0 - 6.0.0.0",
        "7.0.0.0 - 8.0.0.0",
    ]


def test_sweep_merge_empty():
    assert sweep_merge([]) == []


def test_sweep_result_is_disjoint_and_non_adjacent(cidr):
    values = ["10.0.0.0/8", "11.0.0.0/16", "12.0.0.0/8", "11.1.0.0/16", "100.64.0.0/10"]
    merged = sweep_merge(cidr(v) for v in values)
    for left, right in zip(merged, merged[1:]):
        assert left.upper.value < right.lower.value


@pytest.mark.parametrize("strategy", list(MergeStrategy))
def test_merge_intervals_end_to_end(cidr, strategy):
    result = merge_intervals([cidr("10.0.0.0/8"), cidr("10.0.0.0/16")], strategy)
    assert _strs(result) == ["10.0.0.0 - 11.0.0.0"]


def test_merge_intervals_accepts_strategy_names(cidr):
    intervals = [cidr("1.0.0.0/24"), cidr("1.0.2.0/24"), cidr("1.0.1.0/24")]
    assert len(merge_intervals(intervals, "incremental")) == 2
    assert len(merge_intervals(intervals, "cascade")) == 1
    assert len(merge_intervals(intervals, "sweep")) == 1
