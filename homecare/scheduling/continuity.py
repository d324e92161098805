from datetime import time

from homecare.scheduling.merger import sort_by_start
from homecare.scheduling.outcomes import ContinuityOutcome, OperationStatus, not_acceptable
from homecare.scheduling.slots import Slot, iterate_increments


def find_conflicts(dated: list[Slot], recurring: list[Slot]) -> list[tuple[Slot, Slot]]:
    """Pairs of recurring and date-specific slots covering exactly the same span."""
    recurring_spans = {(slot.from_time, slot.to_time): slot for slot in recurring}
    conflicts = []
    for slot in dated:
        match = recurring_spans.get((slot.from_time, slot.to_time))
        if match is not None:
            conflicts.append((match, slot))
    return conflicts


def build_override_map(dated: list[Slot], recurring: list[Slot]) -> dict[time, int]:
    """Map each start time to a slot id, date-specific slots winning over recurring ones."""
    override_map: dict[time, int] = {}
    for slot in sort_by_start(recurring):
        override_map[slot.from_time] = slot.id
    for slot in sort_by_start(dated):
        override_map[slot.from_time] = slot.id
    return override_map


def check_continuity(
    dated: list[Slot],
    recurring: list[Slot],
    from_time: time,
    to_time: time,
) -> ContinuityOutcome:
    """Return the slot ids covering every increment of ``[from_time, to_time)``.

    A recurring and a date-specific slot with identical bounds mark the time
    as blocked for that date, so the range is rejected. An empty range
    succeeds with no ids.
    """
    conflicts = find_conflicts(dated, recurring)
    if conflicts:
        recurring_slot, dated_slot = conflicts[0]
        return not_acceptable(
            f'Slot {dated_slot.id} on {dated_slot.date} duplicates recurring slot '
            f'{recurring_slot.id} at {recurring_slot.from_time:%H:%M}.'
        )

    override_map = build_override_map(dated, recurring)

    slot_ids: list[int] = []
    for current in iterate_increments(from_time, to_time):
        slot_id = override_map.get(current)
        if slot_id is None:
            return not_acceptable(f'No availability at {current:%H:%M}.')
        slot_ids.append(slot_id)

    return ContinuityOutcome(status=OperationStatus.OK, slot_ids=slot_ids)


def collect_slot_ids(dated: list[Slot], recurring: list[Slot]) -> list[int]:
    """Slot ids in start order for a range already known to be linked."""
    override_map = build_override_map(dated, recurring)
    return [override_map[start] for start in sorted(override_map)]
