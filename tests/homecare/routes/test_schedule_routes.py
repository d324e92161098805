from datetime import date, time

import pytest
from fastapi import HTTPException

from homecare.models.schedule import Schedule
from homecare.routes.event_routes import CreateEventRequest, create_event
from homecare.routes.schedule_routes import delete_schedules_by_event, find_scheduled_event

MONDAY = date(2025, 12, 29)
NEXT_MONDAY = date(2026, 1, 5)


@pytest.fixture
def booked_event(scheduling_db, patient, add_slot):
    slot = add_slot(time(9, 0), MONDAY)
    event = create_event(
        data=CreateEventRequest(
            date=MONDAY,
            from_time=time(9, 0),
            to_time=time(9, 30),
            title='Check-up',
            location='Home',
        ),
        current_user=patient,
        db=scheduling_db,
    )
    return slot, event


def test_find_scheduled_event_returns_event_on_date(scheduling_db, worker, booked_event) -> None:
    slot, event = booked_event

    found = find_scheduled_event(slot_id=slot.id, date=MONDAY, current_user=worker, db=scheduling_db)

    assert found.id == event.id


def test_find_scheduled_event_returns_none_for_free_occurrence(scheduling_db, worker, booked_event) -> None:
    slot, _ = booked_event

    found = find_scheduled_event(slot_id=slot.id, date=NEXT_MONDAY, current_user=worker, db=scheduling_db)

    assert found is None


def test_find_scheduled_event_returns_not_found_for_unknown_slot(scheduling_db, worker) -> None:
    with pytest.raises(HTTPException) as exception_info:
        find_scheduled_event(slot_id=999, date=MONDAY, current_user=worker, db=scheduling_db)

    assert exception_info.value.status_code == 404


def test_delete_schedules_by_event_keeps_event(scheduling_db, worker, booked_event) -> None:
    _, event = booked_event

    delete_schedules_by_event(event_id=event.id, current_user=worker, db=scheduling_db)

    assert scheduling_db.query(Schedule).count() == 0
