from __future__ import annotations

from datetime import datetime

import pytest

from care_roster.core.exceptions import AlreadyPublishedError, AuthorizationError, NotFoundError, ValidationError


def test_new_roster_is_draft_for_actor_company(container, manager, roster):
    assert roster.is_published is False
    assert roster.company_id == manager.company_id


def test_publish_sets_flag(container, manager, roster):
    published = container.roster_service.publish(manager, roster.roster_id)

    assert published.is_published is True


def test_second_publish_is_rejected_and_state_unchanged(container, manager, roster):
    container.roster_service.publish(manager, roster.roster_id)

    with pytest.raises(AlreadyPublishedError):
        container.roster_service.publish(manager, roster.roster_id)

    assert container.rosters_repo.get_by_id(roster.roster_id).is_published is True


def test_publish_needs_scheduling_authority(container, employee, accountant, roster):
    for actor in (employee, accountant):
        with pytest.raises(AuthorizationError):
            container.roster_service.publish(actor, roster.roster_id)
    assert container.rosters_repo.get_by_id(roster.roster_id).is_published is False


def test_publish_is_scoped_to_company(container, outside_manager, roster):
    with pytest.raises(AuthorizationError):
        container.roster_service.publish(outside_manager, roster.roster_id)


def test_publish_missing_roster(container, manager):
    with pytest.raises(NotFoundError):
        container.roster_service.publish(manager, 404)


def test_create_validates_dates_and_title(container, manager):
    with pytest.raises(ValidationError):
        container.roster_service.create(
            manager, title="Bad", start_date=datetime(2025, 3, 9), end_date=datetime(2025, 3, 3)
        )
    with pytest.raises(ValidationError):
        container.roster_service.create(
            manager, title="  ", start_date=datetime(2025, 3, 3), end_date=datetime(2025, 3, 9)
        )


def test_employee_reads_published_roster_but_cannot_create(container, manager, employee, roster):
    with pytest.raises(NotFoundError):
        container.roster_service.get(employee, roster.roster_id)
    container.roster_service.publish(manager, roster.roster_id)

    assert container.roster_service.get(employee, roster.roster_id).roster_id == roster.roster_id
    with pytest.raises(AuthorizationError):
        container.roster_service.create(
            employee, title="Mine", start_date=datetime(2025, 3, 3), end_date=datetime(2025, 3, 9)
        )


def _roster(container, actor, title, start_day, end_day):
    return container.roster_service.create(
        actor, title=title, start_date=datetime(2025, 3, start_day), end_date=datetime(2025, 3, end_day)
    )


def test_list_filters_by_publication_and_window(container, manager, roster):
    later = _roster(container, manager, "March week 2", 10, 16)
    container.roster_service.publish(manager, later.roster_id)

    def ids(**filters):
        return [r.roster_id for r in container.roster_service.list(manager, **filters)]

    assert ids() == [later.roster_id, roster.roster_id]
    assert ids(is_published=True) == [later.roster_id]
    assert ids(is_published=False) == [roster.roster_id]
    assert ids(start=datetime(2025, 3, 10)) == [later.roster_id]
    assert ids(end=datetime(2025, 3, 10)) == [roster.roster_id]


def test_employee_list_shows_published_rosters_only(container, manager, employee, roster):
    published = _roster(container, manager, "March week 2", 10, 16)
    container.roster_service.publish(manager, published.roster_id)

    assert [r.roster_id for r in container.roster_service.list(employee)] == [published.roster_id]
    assert container.roster_service.list(employee, is_published=False) == []


def test_list_is_scoped_to_actor_company(container, outside_manager, roster):
    assert container.roster_service.list(outside_manager) == []


def test_update_changes_details_but_not_publication(container, manager, roster):
    container.roster_service.publish(manager, roster.roster_id)

    updated = container.roster_service.update(
        manager, roster.roster_id, title="March, first week", description="Ward B", end_date=datetime(2025, 3, 10)
    )

    assert (updated.title, updated.description) == ("March, first week", "Ward B")
    assert updated.start_date == roster.start_date
    assert updated.end_date == datetime(2025, 3, 10)
    assert updated.is_published is True


def test_update_validates_window_and_authority(container, manager, employee, outside_manager, roster):
    with pytest.raises(ValidationError):
        container.roster_service.update(manager, roster.roster_id, start_date=datetime(2025, 3, 20))
    for actor in (employee, outside_manager):
        with pytest.raises(AuthorizationError):
            container.roster_service.update(actor, roster.roster_id, title="Mine")

    assert container.rosters_repo.get_by_id(roster.roster_id).title == roster.title


def test_delete_empty_roster(container, manager, roster):
    container.roster_service.delete(manager, roster.roster_id)

    assert container.rosters_repo.get_by_id(roster.roster_id) is None
    with pytest.raises(NotFoundError):
        container.roster_service.delete(manager, roster.roster_id)


def test_roster_with_shifts_cannot_be_deleted(container, manager, employee, roster):
    container.shift_service.create(
        manager, roster_id=roster.roster_id, start_time=datetime(2025, 3, 3, 8), end_time=datetime(2025, 3, 3, 12)
    )

    with pytest.raises(AuthorizationError):
        container.roster_service.delete(employee, roster.roster_id)
    with pytest.raises(ValidationError):
        container.roster_service.delete(manager, roster.roster_id)

    assert container.rosters_repo.get_by_id(roster.roster_id) is not None
