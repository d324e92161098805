from datetime import date, time

import pytest

from homecare.scheduling.continuity import build_override_map, check_continuity, collect_slot_ids
from homecare.scheduling.merger import merge_availability
from homecare.scheduling.outcomes import OperationStatus
from homecare.scheduling.slots import DayOfWeek, Slot, day_of_week_for

MONDAY = date(2025, 12, 29)
TUESDAY = date(2025, 12, 30)


def test_day_of_week_counts_from_sunday() -> None:
    assert day_of_week_for(date(2025, 12, 28)) is DayOfWeek.SUNDAY
    assert day_of_week_for(MONDAY) is DayOfWeek.MONDAY
    assert day_of_week_for(date(2026, 1, 3)) is DayOfWeek.SATURDAY


def test_slot_date_is_optional() -> None:
    recurring = Slot(id=1, from_time=time(9, 0), to_time=time(9, 30), day_of_week=DayOfWeek.MONDAY, worker_id=1)
    dated = Slot(id=2, from_time=time(9, 0), to_time=time(9, 30), day_of_week=DayOfWeek.MONDAY, worker_id=1, date=MONDAY)

    assert recurring.date is None
    assert dated.date == MONDAY


def test_merge_availability_queries_recurring_and_dated_separately(slot_store) -> None:
    slot_store.add(2, time(9, 30), MONDAY)
    slot_store.add(1, time(9, 0), MONDAY)
    slot_store.add(5, time(9, 30), MONDAY, recurring=False)
    slot_store.add(9, time(10, 0), MONDAY)

    window = merge_availability(slot_store, 1, MONDAY, time(9, 0), time(10, 0))

    assert [slot.id for slot in window.recurring] == [1, 2]
    assert [slot.id for slot in window.dated] == [5]
    assert slot_store.calls == [
        ('recurring', DayOfWeek.MONDAY, time(9, 0), time(10, 0)),
        ('date', MONDAY, time(9, 0), time(10, 0)),
    ]


def test_merge_availability_ignores_other_workers_and_days(slot_store) -> None:
    slot_store.add(1, time(9, 0), MONDAY, worker_id=2)
    slot_store.add(2, time(9, 0), TUESDAY)

    window = merge_availability(slot_store, 1, MONDAY, time(9, 0), time(10, 0))

    assert window.recurring == []
    assert window.dated == []


def test_check_continuity_returns_recurring_slots_in_order(slot_store) -> None:
    slot_store.add(1, time(9, 0), MONDAY)
    slot_store.add(2, time(9, 30), MONDAY)
    window = merge_availability(slot_store, 1, MONDAY, time(9, 0), time(10, 0))

    outcome = check_continuity(window.dated, window.recurring, time(9, 0), time(10, 0))

    assert outcome.status is OperationStatus.OK
    assert outcome.slot_ids == [1, 2]


def test_check_continuity_rejects_gap(slot_store) -> None:
    slot_store.add(1, time(9, 0), MONDAY)
    window = merge_availability(slot_store, 1, MONDAY, time(9, 0), time(10, 0))

    outcome = check_continuity(window.dated, window.recurring, time(9, 0), time(10, 0))

    assert outcome.status is OperationStatus.NOT_ACCEPTABLE
    assert outcome.slot_ids == []
    assert '09:30' in outcome.reason


def test_check_continuity_fills_gap_with_dated_slot(slot_store) -> None:
    slot_store.add(1, time(9, 0), MONDAY)
    slot_store.add(5, time(9, 30), MONDAY, recurring=False)
    window = merge_availability(slot_store, 1, MONDAY, time(9, 0), time(10, 0))

    outcome = check_continuity(window.dated, window.recurring, time(9, 0), time(10, 0))

    assert outcome.ok
    assert outcome.slot_ids == [1, 5]


def test_check_continuity_rejects_recurring_and_dated_slot_with_same_span(slot_store) -> None:
    slot_store.add(1, time(10, 30), TUESDAY)
    slot_store.add(2, time(11, 0), TUESDAY)
    slot_store.add(3, time(11, 0), TUESDAY, recurring=False)
    slot_store.add(4, time(11, 30), TUESDAY, recurring=False)
    window = merge_availability(slot_store, 1, TUESDAY, time(10, 30), time(12, 0))

    outcome = check_continuity(window.dated, window.recurring, time(10, 30), time(12, 0))

    assert outcome.status is OperationStatus.NOT_ACCEPTABLE
    assert 'duplicates recurring slot 2' in outcome.reason


def test_check_continuity_result_does_not_depend_on_input_order(slot_store) -> None:
    slots = [
        slot_store.add(3, time(10, 0), MONDAY),
        slot_store.add(1, time(9, 0), MONDAY),
        slot_store.add(2, time(9, 30), MONDAY),
    ]
    dated = [slot_store.add(7, time(10, 30), MONDAY, recurring=False)]

    forward = check_continuity(dated, slots, time(9, 0), time(11, 0))
    backward = check_continuity(dated, list(reversed(slots)), time(9, 0), time(11, 0))

    assert forward.slot_ids == backward.slot_ids == [1, 2, 3, 7]


@pytest.mark.parametrize(
    ('from_time', 'to_time', 'expected_ids'),
    [
        (time(9, 0), time(9, 30), [1]),
        (time(9, 0), time(11, 0), [1, 2, 3, 4]),
        (time(9, 30), time(10, 30), [2, 3]),
    ],
)
def test_check_continuity_returns_one_id_per_increment(slot_store, from_time, to_time, expected_ids) -> None:
    recurring = [
        slot_store.add(1, time(9, 0), MONDAY),
        slot_store.add(2, time(9, 30), MONDAY),
        slot_store.add(3, time(10, 0), MONDAY),
        slot_store.add(4, time(10, 30), MONDAY),
    ]

    outcome = check_continuity([], recurring, from_time, to_time)

    assert outcome.slot_ids == expected_ids


def test_check_continuity_accepts_empty_range() -> None:
    outcome = check_continuity([], [], time(9, 0), time(9, 0))

    assert outcome.status is OperationStatus.OK
    assert outcome.slot_ids == []


def test_override_map_prefers_dated_slot_at_same_start(slot_store) -> None:
    recurring = [slot_store.add(1, time(9, 0), MONDAY)]
    dated = [slot_store.add(5, time(9, 0), MONDAY, recurring=False)]

    assert build_override_map(dated, recurring) == {time(9, 0): 5}


def test_collect_slot_ids_skips_continuity_checks(slot_store) -> None:
    recurring = [slot_store.add(5, time(12, 30), TUESDAY)]
    dated = [slot_store.add(7, time(13, 0), TUESDAY, recurring=False)]

    assert collect_slot_ids(dated, recurring) == [5, 7]
