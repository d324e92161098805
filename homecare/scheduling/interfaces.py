"""Storage collaborators the scheduling core reads from and writes to.

Implementations raise ``RepositoryError`` when storage fails and
``LinkConflictError`` when a link would double-book a slot occurrence.
"""

from datetime import date, time
from typing import Iterable, Protocol

from homecare.scheduling.slots import DayOfWeek, Slot


class SlotStore(Protocol):
    def get_recurring_slots(
        self, worker_id: int, day_of_week: DayOfWeek, from_time: time, to_time: time
    ) -> list[Slot]: ...

    def get_date_slots(self, worker_id: int, day: date, from_time: time, to_time: time) -> list[Slot]: ...

    def get_slots_by_ids(self, slot_ids: Iterable[int]) -> list[Slot]: ...


class ScheduleLedger(Protocol):
    def create_links(self, event_id: int, day: date, slot_ids: Iterable[int]) -> list: ...

    def update_links(self, links: list, day: date) -> None: ...

    def delete_links(self, links: list) -> None: ...

    def get_links_by_slot_id(self, slot_id: int) -> list: ...

    def get_links_by_event_id(self, event_id: int) -> list: ...

    def get_booked_links(self, slot_ids: Iterable[int], day: date) -> list: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
