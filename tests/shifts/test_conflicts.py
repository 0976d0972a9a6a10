from datetime import datetime, timedelta
from itertools import product

from care_roster.core.enums import ShiftStatus
from care_roster.shifts.conflicts import find_conflicts, has_conflict, intervals_overlap
from care_roster.shifts.model import Interval, Shift

BASE = datetime(2025, 3, 3)


def at(hour: int) -> datetime:
    return BASE + timedelta(hours=hour)


def shift(shift_id, start, end, *, user_id=7, status=ShiftStatus.SCHEDULED):
    return Shift(
        shift_id=shift_id,
        roster_id=1,
        start_time=at(start),
        end_time=at(end),
        status=status,
        assigned_user_id=user_id,
    )


def test_overlap_matches_interval_definition_for_all_small_intervals():
    hours = range(0, 6)
    for s1, e1, s2, e2 in product(hours, repeat=4):
        if not (s1 < e1 and s2 < e2):
            continue
        shared = set(range(s1, e1)) & set(range(s2, e2))
        assert intervals_overlap(at(s1), at(e1), at(s2), at(e2)) == bool(shared)
        assert intervals_overlap(at(s1), at(e1), at(s2), at(e2)) == (s1 < e2 and s2 < e1)


def test_adjacent_intervals_do_not_overlap():
    assert not intervals_overlap(at(10), at(14), at(14), at(18))
    assert not intervals_overlap(at(14), at(18), at(10), at(14))


def test_overlap_is_symmetric_and_catches_containment():
    assert intervals_overlap(at(9), at(17), at(10), at(11))
    assert intervals_overlap(at(10), at(11), at(9), at(17))


def test_find_conflicts_reports_overlapping_shift_ids():
    existing = [shift(1, 10, 14), shift(2, 15, 16), shift(3, 8, 11)]

    clashes = find_conflicts(Interval(at(10), at(15)), 7, existing)

    assert sorted(s.shift_id for s in clashes) == [1, 3]


def test_canceled_shifts_are_ignored():
    existing = [shift(1, 10, 14, status=ShiftStatus.CANCELED)]

    assert not has_conflict(Interval(at(11), at(12)), 7, existing)


def test_other_assignees_are_ignored():
    existing = [shift(1, 10, 14, user_id=8)]

    assert not has_conflict(Interval(at(11), at(12)), 7, existing)


def test_shift_being_updated_is_excluded():
    existing = [shift(1, 10, 14)]

    assert has_conflict(Interval(at(11), at(15)), 7, existing)
    assert not has_conflict(Interval(at(11), at(15)), 7, existing, exclude_shift_id=1)
