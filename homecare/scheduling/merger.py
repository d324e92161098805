from dataclasses import dataclass
from datetime import date, time

from homecare.scheduling.interfaces import SlotStore
from homecare.scheduling.slots import Slot, day_of_week_for


@dataclass(frozen=True)
class AvailabilityWindow:
    recurring: list[Slot]
    dated: list[Slot]


def sort_by_start(slots: list[Slot]) -> list[Slot]:
    return sorted(slots, key=lambda slot: (slot.from_time, slot.id))


def merge_availability(
    store: SlotStore,
    worker_id: int,
    day: date,
    from_time: time,
    to_time: time,
) -> AvailabilityWindow:
    """Fetch the recurring and the date-specific slots starting in ``[from_time, to_time)``.

    The two lists are fetched separately and are not reconciled here; override
    precedence is applied by the caller. ``RepositoryError`` from the store
    propagates unchanged.
    """
    recurring = store.get_recurring_slots(worker_id, day_of_week_for(day), from_time, to_time)
    dated = store.get_date_slots(worker_id, day, from_time, to_time)

    return AvailabilityWindow(recurring=sort_by_start(recurring), dated=sort_by_start(dated))
