from datetime import time

import pytest

from inkstudio.intervals import IntervalSet, format_minutes, overlaps, to_minutes


def test_to_minutes_accepts_time_and_string():
    assert to_minutes(time(9, 30)) == 570
    assert to_minutes("09:30") == 570
    assert to_minutes("00:00") == 0
    assert to_minutes("23:59") == 1439


def test_to_minutes_rejects_garbage():
    with pytest.raises(ValueError):
        to_minutes("nine")


def test_format_minutes_is_zero_padded():
    assert format_minutes(0) == "00:00"
    assert format_minutes(545) == "09:05"
    assert format_minutes(1440) == "24:00"


def test_touching_ranges_do_not_overlap():
    assert not overlaps(540, 600, 600, 660)
    assert not overlaps(600, 660, 540, 600)
    assert overlaps(540, 601, 600, 660)
    assert overlaps(540, 700, 600, 660)  # containment


def test_from_ranges_sorts_merges_and_drops_empty():
    s = IntervalSet.from_ranges([(900, 1000), (540, 600), (600, 660), (700, 700), (950, 1100)])
    assert list(s) == [(540, 660), (900, 1100)]
    assert len(s) == 2


def test_empty_set_is_falsy():
    assert not IntervalSet.empty()
    assert len(IntervalSet.empty()) == 0
    assert IntervalSet([(540, 600)])


def test_subtract_splits_a_range_in_two():
    s = IntervalSet([(540, 780)]).subtract([(600, 660)])
    assert list(s) == [(540, 600), (660, 780)]


def test_subtract_edges_and_whole_ranges():
    s = IntervalSet([(540, 780), (900, 1140)])
    assert list(s.subtract([(500, 600)])) == [(600, 780), (900, 1140)]
    assert list(s.subtract([(700, 1000)])) == [(540, 700), (1000, 1140)]
    assert list(s.subtract([(0, 1440)])) == []
    assert s.subtract([]) == s


def test_union_merges_overlapping_input():
    s = IntervalSet([(540, 600)]).union(IntervalSet([(570, 720), (800, 900)]))
    assert list(s) == [(540, 720), (800, 900)]


def test_covers_needs_a_single_range():
    s = IntervalSet([(540, 600), (660, 720)])
    assert s.covers(540, 600)
    assert s.covers(550, 590)
    assert not s.covers(570, 690)
    assert not s.covers(500, 560)


def test_repr_and_strings():
    s = IntervalSet([(540, 780), (900, 1140)])
    assert s.as_strings() == [("09:00", "13:00"), ("15:00", "19:00")]
    assert repr(s) == "IntervalSet([09:00-13:00, 15:00-19:00])"


def test_equal_sets_hash_equal():
    a = IntervalSet([(540, 600), (600, 660)])
    b = IntervalSet([(540, 660)])
    assert a == b
    assert hash(a) == hash(b)
    assert a.merge() == a
