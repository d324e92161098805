"""Slot value type and the time arithmetic shared by the scheduling core."""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from datetime import date as date_type
from enum import IntEnum

SLOT_INCREMENT_MINUTES = 30
SLOT_INCREMENT = timedelta(minutes=SLOT_INCREMENT_MINUTES)


class DayOfWeek(IntEnum):
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6


def day_of_week_for(day: date) -> DayOfWeek:
    # date.weekday() counts from Monday = 0
    return DayOfWeek((day.weekday() + 1) % 7)


@dataclass(frozen=True)
class Slot:
    id: int
    from_time: time
    to_time: time
    day_of_week: DayOfWeek
    worker_id: int
    date: date_type | None = None

    @classmethod
    def from_model(cls, availability) -> 'Slot':
        return cls(
            id=availability.id,
            from_time=availability.from_time,
            to_time=availability.to_time,
            day_of_week=DayOfWeek(availability.day_of_week),
            worker_id=availability.worker_id,
            date=availability.date,
        )


@dataclass(frozen=True)
class TimeWindow:
    """An event window on a concrete date, half-open ``[from_time, to_time)``."""

    date: date
    from_time: time
    to_time: time

    @property
    def start(self) -> datetime:
        return datetime.combine(self.date, self.from_time)

    @property
    def end(self) -> datetime:
        return datetime.combine(self.date, self.to_time)


def add_increment(value: time, steps: int = 1) -> time:
    shifted = datetime.combine(date.min, value) + SLOT_INCREMENT * steps
    return shifted.time()


def is_on_increment(value: time) -> bool:
    return value.second == 0 and value.microsecond == 0 and value.minute % SLOT_INCREMENT_MINUTES == 0


def iterate_increments(from_time: time, to_time: time):
    """Yield the start of every increment in ``[from_time, to_time)``."""
    current = datetime.combine(date.min, from_time)
    end = datetime.combine(date.min, to_time)
    while current < end:
        yield current.time()
        current += SLOT_INCREMENT
