"""Work out which schedule links change when an event moves.

The start and the end of the event are compared independently. Time that
the new window gains must pass the continuity check and ends up in
``for_create``; time it loses is released into ``for_delete``. When the
event stays on the same date the overlap of both windows keeps its links and
is returned as ``for_update``.
"""

import logging
from datetime import time

from homecare.scheduling.continuity import check_continuity, collect_slot_ids
from homecare.scheduling.interfaces import SlotStore
from homecare.scheduling.merger import merge_availability
from homecare.scheduling.outcomes import DeltaOutcome, OperationStatus, RepositoryError
from homecare.scheduling.slots import TimeWindow

logger = logging.getLogger(__name__)


class _PlanRejected(Exception):
    def __init__(self, reason: str | None):
        super().__init__(reason)
        self.reason = reason


def _claim(store: SlotStore, worker_id: int, window: TimeWindow, from_time: time, to_time: time) -> list[int]:
    available = merge_availability(store, worker_id, window.date, from_time, to_time)
    outcome = check_continuity(available.dated, available.recurring, from_time, to_time)
    if not outcome.ok:
        raise _PlanRejected(outcome.reason)
    return outcome.slot_ids


def _collect(store: SlotStore, worker_id: int, window: TimeWindow, from_time: time, to_time: time) -> list[int]:
    if from_time >= to_time:
        return []
    available = merge_availability(store, worker_id, window.date, from_time, to_time)
    return collect_slot_ids(available.dated, available.recurring)


def plan_schedule_delta(
    store: SlotStore,
    worker_id: int,
    event_id: int,
    old: TimeWindow,
    new: TimeWindow,
) -> DeltaOutcome:
    for_create: list[int] = []
    for_delete: list[int] = []
    for_update: list[int] = []

    try:
        # start boundary
        if new.start < old.start:
            check_to = min(old.start, new.end)
            for_create.extend(_claim(store, worker_id, new, new.from_time, check_to.time()))
            update_from = old.from_time
        elif old.start < new.start:
            get_to = min(old.end, new.start)
            for_delete.extend(_collect(store, worker_id, old, old.from_time, get_to.time()))
            update_from = new.from_time
        else:
            update_from = old.from_time

        # end boundary
        if new.end > old.end:
            check_from = max(old.end, new.start)
            for_create.extend(_claim(store, worker_id, new, check_from.time(), new.to_time))
            update_to = old.to_time
        elif new.end < old.end:
            get_from = max(old.start, new.end)
            for_delete.extend(_collect(store, worker_id, old, get_from.time(), old.to_time))
            update_to = new.to_time
        else:
            update_to = old.to_time

        if new.date == old.date and old.from_time <= update_from < update_to <= old.to_time:
            for_update.extend(_collect(store, worker_id, old, update_from, update_to))
    except _PlanRejected as rejected:
        logger.info(
            'Update of event %s rejected, worker %s has no continuous availability: %s',
            event_id, worker_id, rejected.reason,
        )
        return DeltaOutcome(status=OperationStatus.NOT_ACCEPTABLE, reason=rejected.reason)
    except RepositoryError as exc:
        logger.error('Could not plan schedule update for event %s: %s', event_id, exc)
        return DeltaOutcome(status=OperationStatus.ERROR, reason=str(exc))

    return DeltaOutcome(
        status=OperationStatus.OK,
        for_create=for_create,
        for_delete=for_delete,
        for_update=for_update,
    )
