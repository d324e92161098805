import os
from datetime import date, time

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from homecare.database import Base  # noqa: E402
from homecare.models.availability import Availability  # noqa: E402
from homecare.models.event import Event  # noqa: E402
from homecare.models.schedule import Schedule  # noqa: E402
from homecare.models.user import User  # noqa: E402
from homecare.scheduling.slots import Slot, add_increment, day_of_week_for  # noqa: E402

TABLES = [User.__table__, Availability.__table__, Event.__table__, Schedule.__table__]


class InMemorySlotStore:
    def __init__(self):
        self.slots: list[Slot] = []
        self.calls: list[tuple] = []

    def add(self, slot_id: int, from_time: time, day: date, recurring: bool = True, worker_id: int = 1) -> Slot:
        slot = Slot(
            id=slot_id,
            from_time=from_time,
            to_time=add_increment(from_time),
            day_of_week=day_of_week_for(day),
            worker_id=worker_id,
            date=None if recurring else day,
        )
        self.slots.append(slot)
        return slot

    def get_recurring_slots(self, worker_id, day_of_week, from_time, to_time):
        self.calls.append(('recurring', day_of_week, from_time, to_time))
        return [
            slot for slot in self.slots
            if slot.worker_id == worker_id
            and slot.date is None
            and slot.day_of_week == day_of_week
            and from_time <= slot.from_time < to_time
        ]

    def get_date_slots(self, worker_id, day, from_time, to_time):
        self.calls.append(('date', day, from_time, to_time))
        return [
            slot for slot in self.slots
            if slot.worker_id == worker_id
            and slot.date == day
            and from_time <= slot.from_time < to_time
        ]

    def get_slots_by_ids(self, slot_ids):
        wanted = set(slot_ids)
        return [slot for slot in self.slots if slot.id in wanted]


@pytest.fixture
def slot_store() -> InMemorySlotStore:
    return InMemorySlotStore()


@pytest.fixture
def scheduling_db():
    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine, tables=TABLES)

    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine, tables=list(reversed(TABLES)))


@pytest.fixture
def worker(scheduling_db) -> User:
    user = User(email='worker@example.com', name='Wendy Worker', role='worker')
    scheduling_db.add(user)
    scheduling_db.commit()
    scheduling_db.refresh(user)
    return user


@pytest.fixture
def patient(scheduling_db, worker) -> User:
    user = User(email='patient@example.com', name='Pat Patient', role='patient', worker_id=worker.id)
    scheduling_db.add(user)
    scheduling_db.commit()
    scheduling_db.refresh(user)
    return user


@pytest.fixture
def add_slot(scheduling_db, worker):
    def _add_slot(from_time: time, day: date, recurring: bool = True, worker_id: int | None = None) -> Availability:
        availability = Availability(
            from_time=from_time,
            to_time=add_increment(from_time),
            day_of_week=int(day_of_week_for(day)),
            date=None if recurring else day,
            worker_id=worker_id or worker.id,
        )
        scheduling_db.add(availability)
        scheduling_db.commit()
        scheduling_db.refresh(availability)
        return availability

    return _add_slot


@pytest.fixture(autouse=True)
def skip_schema_check(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr('homecare.routes.common.ensure_scheduling_schema', lambda: None)
