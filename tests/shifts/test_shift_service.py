from __future__ import annotations

import dataclasses
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

import pytest

from care_roster.core.enums import ShiftStatus
from care_roster.core.exceptions import (
    AuthorizationError,
    ConcurrentModificationError,
    InvalidTransitionError,
    NotFoundError,
    ShiftConflictError,
    ValidationError,
)
from care_roster.shifts.model import ShiftUpdate


def _hour(h: int) -> datetime:
    return datetime(2025, 3, 3, h)


def _create(container, actor, roster, start, end, assignee=None):
    return container.shift_service.create(
        actor,
        roster_id=roster.roster_id,
        start_time=_hour(start),
        end_time=_hour(end),
        assigned_user_id=assignee,
    )


def test_overlapping_assignment_is_rejected_and_adjacent_one_accepted(container, manager, roster):
    a = _create(container, manager, roster, 10, 14, assignee=10)
    b = _create(container, manager, roster, 13, 16)
    c = _create(container, manager, roster, 14, 18)

    with pytest.raises(ShiftConflictError) as exc_info:
        container.shift_service.assign(manager, b.shift_id, 10)
    assert exc_info.value.conflicting_shift_ids == [a.shift_id]
    assert container.shifts_repo.get_by_id(b.shift_id).assigned_user_id is None

    assigned = container.shift_service.assign(manager, c.shift_id, 10)
    assert assigned.assigned_user_id == 10


def test_create_with_conflicting_assignee_is_rejected(container, manager, roster):
    _create(container, manager, roster, 10, 14, assignee=10)

    with pytest.raises(ShiftConflictError):
        _create(container, manager, roster, 12, 13, assignee=10)

    assert len(container.shifts_repo.list_active_for_assignee(10)) == 1


def test_same_interval_for_different_workers_is_fine(container, manager, roster):
    _create(container, manager, roster, 10, 14, assignee=10)
    other = _create(container, manager, roster, 10, 14, assignee=11)

    assert other.assigned_user_id == 11


@pytest.mark.parametrize("start,end", [(14, 10), (10, 10)])
def test_start_must_precede_end(container, manager, roster, start, end):
    with pytest.raises(ValidationError):
        _create(container, manager, roster, start, end)


def test_assignee_must_belong_to_roster_company(container, manager, roster):
    with pytest.raises(ValidationError):
        _create(container, manager, roster, 10, 14, assignee=20)


def test_inactive_assignee_is_rejected(container, manager, roster):
    with pytest.raises(ValidationError):
        _create(container, manager, roster, 10, 14, assignee=12)


def test_unknown_assignee_and_roster_are_not_found(container, manager, roster):
    with pytest.raises(NotFoundError):
        _create(container, manager, roster, 10, 14, assignee=999)
    with pytest.raises(NotFoundError):
        container.shift_service.create(manager, roster_id=999, start_time=_hour(10), end_time=_hour(11))


def test_employee_cannot_schedule(container, employee, roster):
    with pytest.raises(AuthorizationError):
        _create(container, employee, roster, 10, 14)


def test_manager_of_another_company_cannot_schedule(container, outside_manager, roster):
    with pytest.raises(AuthorizationError):
        _create(container, outside_manager, roster, 10, 14)


def test_moving_a_shift_onto_another_is_rejected(container, manager, roster):
    _create(container, manager, roster, 10, 14, assignee=10)
    later = _create(container, manager, roster, 15, 18, assignee=10)

    with pytest.raises(ShiftConflictError):
        container.shift_service.update(manager, later.shift_id, ShiftUpdate(start_time=_hour(13)))

    assert container.shifts_repo.get_by_id(later.shift_id).start_time == _hour(15)


def test_update_within_own_slot_does_not_conflict_with_itself(container, manager, roster):
    s = _create(container, manager, roster, 10, 14, assignee=10)

    moved = container.shift_service.update(manager, s.shift_id, ShiftUpdate(end_time=_hour(15)))

    assert moved.end_time == _hour(15)


def test_update_rejects_reversed_interval(container, manager, roster):
    s = _create(container, manager, roster, 10, 14)

    with pytest.raises(ValidationError):
        container.shift_service.update(manager, s.shift_id, ShiftUpdate(end_time=_hour(9)))


def test_canceled_shift_frees_the_slot(container, manager, roster):
    s = _create(container, manager, roster, 10, 14, assignee=10)
    container.shift_service.update(manager, s.shift_id, ShiftUpdate(status=ShiftStatus.CANCELED))

    replacement = _create(container, manager, roster, 10, 14, assignee=10)

    assert replacement.assigned_user_id == 10


def test_status_transitions(container, manager, roster):
    s = _create(container, manager, roster, 10, 14, assignee=10)

    s = container.shift_service.update(manager, s.shift_id, ShiftUpdate(status=ShiftStatus.IN_PROGRESS))
    s = container.shift_service.update(manager, s.shift_id, ShiftUpdate(status=ShiftStatus.COMPLETED))
    assert s.status == ShiftStatus.COMPLETED

    with pytest.raises(InvalidTransitionError):
        container.shift_service.update(manager, s.shift_id, ShiftUpdate(status=ShiftStatus.SCHEDULED))


def test_canceled_shift_cannot_be_assigned(container, manager, roster):
    s = _create(container, manager, roster, 10, 14)
    container.shift_service.update(manager, s.shift_id, ShiftUpdate(status=ShiftStatus.CANCELED))

    with pytest.raises(ValidationError):
        container.shift_service.assign(manager, s.shift_id, 10)


def test_concurrent_overlapping_assignments_admit_exactly_one(container, manager, roster):
    shifts = [_create(container, manager, roster, 10 + i % 2, 14 + i % 2) for i in range(8)]
    barrier = threading.Barrier(len(shifts), timeout=30)

    def attempt(shift_id: int) -> bool:
        barrier.wait()
        try:
            container.shift_service.assign(manager, shift_id, 10)
            return True
        except ShiftConflictError:
            return False

    with ThreadPoolExecutor(max_workers=len(shifts)) as pool:
        results = list(pool.map(attempt, [s.shift_id for s in shifts]))

    assert results.count(True) == 1
    assert len(container.shifts_repo.list_active_for_assignee(10)) == 1


def test_write_from_stale_read_cannot_double_book(container, manager, roster):
    s1 = _create(container, manager, roster, 10, 14, assignee=10)
    stale = container.shifts_repo.get_by_id(s1.shift_id)

    container.shift_service.update(manager, s1.shift_id, ShiftUpdate(start_time=_hour(15), end_time=_hour(17)))
    _create(container, manager, roster, 10, 14, assignee=10)

    with pytest.raises(ConcurrentModificationError):
        container.shifts_repo.save(
            dataclasses.replace(stale, title="Renamed"), expected_version=stale.version
        )
    with pytest.raises(ConcurrentModificationError):
        container.shift_service.update(
            manager, s1.shift_id, ShiftUpdate(title="Renamed"), expected_version=stale.version
        )

    booked = sorted((s.start_time, s.end_time) for s in container.shifts_repo.list_active_for_assignee(10))
    assert booked == [(_hour(10), _hour(14)), (_hour(15), _hour(17))]


def test_every_write_bumps_the_version(container, manager, roster):
    s = _create(container, manager, roster, 10, 14)
    assert s.version == 1

    s = container.shift_service.update(manager, s.shift_id, ShiftUpdate(title="Morning"), expected_version=1)
    assert s.version == 2
    s = container.shift_service.assign(manager, s.shift_id, 10)
    assert s.version == 3
    assert container.shifts_repo.get_by_id(s.shift_id).version == 3


def test_assign_with_outdated_version_is_refused(container, manager, roster):
    s = _create(container, manager, roster, 10, 14)
    container.shift_service.update(manager, s.shift_id, ShiftUpdate(notes="bring keys"))

    with pytest.raises(ConcurrentModificationError):
        container.shift_service.assign(manager, s.shift_id, 10, expected_version=s.version)

    assert container.shifts_repo.get_by_id(s.shift_id).assigned_user_id is None


def test_description_is_stored_and_editable(container, manager, roster):
    s = container.shift_service.create(
        manager,
        roster_id=roster.roster_id,
        start_time=_hour(8),
        end_time=_hour(12),
        description="  Morning medication round  ",
    )
    assert s.description == "Morning medication round"

    s = container.shift_service.update(manager, s.shift_id, ShiftUpdate(description="Evening round"))
    assert s.description == "Evening round"


def test_list_filters_by_roster_assignee_window_and_status(container, manager, roster):
    a = _create(container, manager, roster, 8, 10, assignee=10)
    b = _create(container, manager, roster, 11, 13, assignee=11)
    c = _create(container, manager, roster, 14, 16, assignee=10)
    container.shift_service.update(manager, c.shift_id, ShiftUpdate(status=ShiftStatus.CANCELED))

    def ids(**filters):
        return [s.shift_id for s in container.shift_service.list(manager, **filters)]

    assert ids() == [a.shift_id, b.shift_id, c.shift_id]
    assert ids(assigned_user_id=10) == [a.shift_id, c.shift_id]
    assert ids(status=ShiftStatus.CANCELED) == [c.shift_id]
    assert ids(start=_hour(11), end=_hour(13)) == [b.shift_id]
    assert ids(roster_id=roster.roster_id + 100) == []


def test_employee_lists_only_own_shifts_in_published_rosters(container, manager, employee, roster):
    mine = _create(container, manager, roster, 8, 10, assignee=10)
    _create(container, manager, roster, 8, 10, assignee=11)

    assert container.shift_service.list(employee) == []
    with pytest.raises(NotFoundError):
        container.shift_service.get(employee, mine.shift_id)

    container.roster_service.publish(manager, roster.roster_id)

    listed = container.shift_service.list(employee, assigned_user_id=11)
    assert [s.shift_id for s in listed] == [mine.shift_id]
    assert container.shift_service.get(employee, mine.shift_id).shift_id == mine.shift_id


def test_list_is_scoped_to_actor_company(container, manager, outside_manager, roster):
    _create(container, manager, roster, 8, 10, assignee=10)

    assert container.shift_service.list(outside_manager) == []


def test_delete_shift(container, manager, roster):
    s = _create(container, manager, roster, 8, 10, assignee=10)

    container.shift_service.delete(manager, s.shift_id)

    assert container.shifts_repo.get_by_id(s.shift_id) is None
    with pytest.raises(NotFoundError):
        container.shift_service.delete(manager, s.shift_id)


def test_delete_requires_scheduling_authority(container, manager, employee, outside_manager, roster):
    s = _create(container, manager, roster, 8, 10)

    for actor in (employee, outside_manager):
        with pytest.raises(AuthorizationError):
            container.shift_service.delete(actor, s.shift_id)

    assert container.shifts_repo.get_by_id(s.shift_id) is not None


def test_shift_with_attendance_cannot_be_deleted(container, manager, roster):
    s = _create(container, manager, roster, 8, 10, assignee=10)
    container.attendance_service.clock_in(manager, shift_id=s.shift_id, user_id=10, clock_in=_hour(8))

    with pytest.raises(ValidationError):
        container.shift_service.delete(manager, s.shift_id)

    assert container.shifts_repo.get_by_id(s.shift_id) is not None
