import logging
from datetime import date, time, timedelta
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from homecare.models.availability import Availability
from homecare.scheduling.outcomes import RepositoryError
from homecare.scheduling.slots import DayOfWeek, Slot

logger = logging.getLogger(__name__)


class SlotRepository:
    """Reads and writes a worker's availability slots."""

    def __init__(self, db: Session):
        self.db = db

    def get_recurring_slots(
        self, worker_id: int, day_of_week: DayOfWeek, from_time: time, to_time: time
    ) -> list[Slot]:
        try:
            rows = self.db.query(Availability).filter(
                Availability.worker_id == worker_id,
                Availability.date.is_(None),
                Availability.day_of_week == int(day_of_week),
                Availability.from_time >= from_time,
                Availability.from_time < to_time,
            ).order_by(Availability.from_time.asc()).all()
        except SQLAlchemyError as exc:
            logger.exception(
                'Could not retrieve recurring availability for worker %s on day %s between %s and %s',
                worker_id, int(day_of_week), from_time, to_time,
            )
            raise RepositoryError('Could not retrieve recurring availability.') from exc

        return [Slot.from_model(row) for row in rows]

    def get_date_slots(self, worker_id: int, day: date, from_time: time, to_time: time) -> list[Slot]:
        try:
            rows = self.db.query(Availability).filter(
                Availability.worker_id == worker_id,
                Availability.date == day,
                Availability.from_time >= from_time,
                Availability.from_time < to_time,
            ).order_by(Availability.from_time.asc()).all()
        except SQLAlchemyError as exc:
            logger.exception(
                'Could not retrieve availability for worker %s on %s between %s and %s',
                worker_id, day, from_time, to_time,
            )
            raise RepositoryError('Could not retrieve date availability.') from exc

        return [Slot.from_model(row) for row in rows]

    def get_slots_by_ids(self, slot_ids: Iterable[int]) -> list[Slot]:
        ids = list(slot_ids)
        if not ids:
            return []

        try:
            rows = self.db.query(Availability).filter(Availability.id.in_(ids)).all()
        except SQLAlchemyError as exc:
            logger.exception('Could not retrieve availability with ids %s', ids)
            raise RepositoryError('Could not retrieve availability.') from exc

        return [Slot.from_model(row) for row in rows]

    def get_slot_by_id(self, slot_id: int) -> Slot | None:
        slots = self.get_slots_by_ids([slot_id])
        return slots[0] if slots else None

    def get_week_slots(self, worker_id: int, monday: date) -> tuple[list[Slot], list[Slot]]:
        """Recurring slots plus the date-specific slots between ``monday`` and the following sunday."""
        sunday = monday + timedelta(days=6)
        try:
            recurring = self.db.query(Availability).filter(
                Availability.worker_id == worker_id,
                Availability.date.is_(None),
            ).order_by(Availability.day_of_week.asc(), Availability.from_time.asc()).all()
            dated = self.db.query(Availability).filter(
                Availability.worker_id == worker_id,
                Availability.date >= monday,
                Availability.date <= sunday,
            ).order_by(Availability.date.asc(), Availability.from_time.asc()).all()
        except SQLAlchemyError as exc:
            logger.exception('Could not retrieve week availability for worker %s from %s', worker_id, monday)
            raise RepositoryError("Could not retrieve week's availability.") from exc

        return [Slot.from_model(row) for row in recurring], [Slot.from_model(row) for row in dated]

    def find_matching_slot(
        self, worker_id: int, day_of_week: DayOfWeek, day: date | None, from_time: time
    ) -> Slot | None:
        try:
            query = self.db.query(Availability).filter(
                Availability.worker_id == worker_id,
                Availability.day_of_week == int(day_of_week),
                Availability.from_time == from_time,
            )
            if day is None:
                query = query.filter(Availability.date.is_(None))
            else:
                query = query.filter(Availability.date == day)
            row = query.first()
        except SQLAlchemyError as exc:
            logger.exception('Could not look up availability for worker %s at %s', worker_id, from_time)
            raise RepositoryError('Could not retrieve availability.') from exc

        return Slot.from_model(row) if row else None

    def create_slot(
        self,
        worker_id: int,
        day_of_week: DayOfWeek,
        day: date | None,
        from_time: time,
        to_time: time,
    ) -> Slot:
        availability = Availability(
            worker_id=worker_id,
            day_of_week=int(day_of_week),
            date=day,
            from_time=from_time,
            to_time=to_time,
        )
        try:
            self.db.add(availability)
            self.db.commit()
            self.db.refresh(availability)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Could not create availability for worker %s at %s', worker_id, from_time)
            raise RepositoryError('Could not create availability.') from exc

        return Slot.from_model(availability)

    def delete_slot(self, slot_id: int) -> bool:
        try:
            availability = self.db.query(Availability).filter(Availability.id == slot_id).first()
            if availability is None:
                return False
            self.db.delete(availability)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Could not delete availability %s', slot_id)
            raise RepositoryError('Could not delete availability.') from exc

        return True
