"""Booking operations the HTTP layer calls.

``check_and_reserve`` and ``plan_update`` only read; the ``book_event``,
``reschedule_event`` and ``release_event`` functions write events and their
schedule links in a single transaction, so a rejected or failed plan leaves
nothing behind.
"""

import logging

from homecare.models.event import Event
from homecare.repositories.event_repository import EventRepository
from homecare.scheduling.continuity import check_continuity
from homecare.scheduling.delta import plan_schedule_delta
from homecare.scheduling.interfaces import ScheduleLedger, SlotStore
from homecare.scheduling.merger import merge_availability
from homecare.scheduling.outcomes import (
    DeltaOutcome,
    LinkConflictError,
    OperationStatus,
    RepositoryError,
    ReservationOutcome,
)
from homecare.scheduling.slots import TimeWindow

logger = logging.getLogger(__name__)


def window_of(event: Event) -> TimeWindow:
    return TimeWindow(date=event.date, from_time=event.from_time, to_time=event.to_time)


def find_booked_slot_ids(ledger: ScheduleLedger, window_date, slot_ids: list[int], event_id: int | None) -> list[int]:
    """Slot ids already linked on ``window_date`` to an event other than ``event_id``."""
    links = ledger.get_booked_links(slot_ids, window_date)
    return sorted({link.slot_id for link in links if link.event_id != event_id})


def check_and_reserve(
    store: SlotStore,
    ledger: ScheduleLedger,
    worker_id: int,
    window: TimeWindow,
    event_id: int | None = None,
) -> ReservationOutcome:
    try:
        available = merge_availability(store, worker_id, window.date, window.from_time, window.to_time)
        continuity = check_continuity(available.dated, available.recurring, window.from_time, window.to_time)
        if not continuity.ok:
            logger.info(
                'Worker %s is not available on %s from %s to %s: %s',
                worker_id, window.date, window.from_time, window.to_time, continuity.reason,
            )
            return ReservationOutcome(status=OperationStatus.NOT_ACCEPTABLE, reason=continuity.reason)

        booked = find_booked_slot_ids(ledger, window.date, continuity.slot_ids, event_id)
    except RepositoryError as exc:
        logger.error('Could not check availability for worker %s on %s: %s', worker_id, window.date, exc)
        return ReservationOutcome(status=OperationStatus.ERROR, reason=str(exc))

    if booked:
        return ReservationOutcome(
            status=OperationStatus.NOT_ACCEPTABLE,
            reason=f'Slots {booked} are already booked on {window.date}.',
        )

    return ReservationOutcome(status=OperationStatus.OK, slot_ids=continuity.slot_ids)


def plan_update(
    store: SlotStore,
    ledger: ScheduleLedger,
    event_id: int,
    worker_id: int,
    old_window: TimeWindow,
    new_window: TimeWindow,
) -> DeltaOutcome:
    plan = plan_schedule_delta(store, worker_id, event_id, old_window, new_window)
    if not plan.ok:
        return plan

    try:
        booked = find_booked_slot_ids(ledger, new_window.date, plan.for_create, event_id)
    except RepositoryError as exc:
        logger.error('Could not check schedules for event %s: %s', event_id, exc)
        return DeltaOutcome(status=OperationStatus.ERROR, reason=str(exc))

    if booked:
        return DeltaOutcome(
            status=OperationStatus.NOT_ACCEPTABLE,
            reason=f'Slots {booked} are already booked on {new_window.date}.',
        )

    return plan


def book_event(
    store: SlotStore,
    ledger: ScheduleLedger,
    events: EventRepository,
    event: Event,
) -> ReservationOutcome:
    reservation = check_and_reserve(store, ledger, event.worker_id, window_of(event))
    if not reservation.ok:
        return reservation

    try:
        events.add_event(event)
        ledger.create_links(event.id, event.date, reservation.slot_ids)
        ledger.commit()
    except LinkConflictError as exc:
        ledger.rollback()
        return ReservationOutcome(status=OperationStatus.NOT_ACCEPTABLE, reason=str(exc))
    except RepositoryError as exc:
        ledger.rollback()
        return ReservationOutcome(status=OperationStatus.ERROR, reason=str(exc))

    logger.info('Event %s booked with slots %s on %s', event.id, reservation.slot_ids, event.date)
    return reservation


def apply_plan(
    store: SlotStore,
    ledger: ScheduleLedger,
    event: Event,
    new_window: TimeWindow,
    plan: DeltaOutcome,
) -> None:
    """Stage the plan against the ledger. The caller commits or rolls back.

    Existing links are sorted by the start of the slot they hold, not by the
    planned ids. A dated slot added after booking replaces the recurring one
    in the plan while the event still holds the recurring link.
    """
    links = ledger.get_links_by_event_id(event.id)
    starts = {slot.id: slot.from_time for slot in store.get_slots_by_ids([link.slot_id for link in links])}

    for_update = []
    for_delete = []
    for link in links:
        start = starts.get(link.slot_id)
        if (
            event.date == new_window.date
            and start is not None
            and new_window.from_time <= start < new_window.to_time
        ):
            for_update.append(link)
        else:
            for_delete.append(link)

    released = sorted(link.slot_id for link in for_delete)
    if released != sorted(plan.for_delete):
        logger.warning(
            'Event %s releases slots %s outside its new window, planned %s',
            event.id, released, plan.for_delete,
        )

    ledger.delete_links(for_delete)
    ledger.create_links(event.id, new_window.date, plan.for_create)
    ledger.update_links(for_update, new_window.date)


def reschedule_event(
    store: SlotStore,
    ledger: ScheduleLedger,
    event: Event,
    new_window: TimeWindow,
    title: str | None = None,
    location: str | None = None,
) -> DeltaOutcome:
    plan = plan_update(store, ledger, event.id, event.worker_id, window_of(event), new_window)
    if not plan.ok:
        return plan

    try:
        apply_plan(store, ledger, event, new_window, plan)
        event.date = new_window.date
        event.from_time = new_window.from_time
        event.to_time = new_window.to_time
        if title is not None:
            event.title = title
        if location is not None:
            event.location = location
        ledger.commit()
    except LinkConflictError as exc:
        ledger.rollback()
        return DeltaOutcome(status=OperationStatus.NOT_ACCEPTABLE, reason=str(exc))
    except RepositoryError as exc:
        ledger.rollback()
        return DeltaOutcome(status=OperationStatus.ERROR, reason=str(exc))

    logger.info(
        'Event %s rescheduled: created %s, deleted %s, updated %s',
        event.id, plan.for_create, plan.for_delete, plan.for_update,
    )
    return plan


def release_event(ledger: ScheduleLedger, events: EventRepository, event: Event) -> OperationStatus:
    try:
        ledger.delete_links(ledger.get_links_by_event_id(event.id))
        events.delete_event(event)
        ledger.commit()
    except RepositoryError as exc:
        ledger.rollback()
        logger.error('Could not delete event %s: %s', event.id, exc)
        return OperationStatus.ERROR

    return OperationStatus.OK
