import logging
from datetime import date
from typing import Iterable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from homecare.models.schedule import Schedule
from homecare.scheduling.outcomes import LinkConflictError, RepositoryError

logger = logging.getLogger(__name__)


class ScheduleRepository:
    """Schedule links between slot occurrences and events.

    Mutations are flushed but not committed, so a caller can apply several of
    them and then ``commit`` or ``rollback`` once.
    """

    def __init__(self, db: Session):
        self.db = db

    def _flush(self, action: str) -> None:
        try:
            self.db.flush()
        except IntegrityError as exc:
            logger.warning('Schedule link conflict while trying to %s: %s', action, exc.orig)
            raise LinkConflictError(f'Could not {action}, slot is already booked.') from exc
        except SQLAlchemyError as exc:
            logger.exception('Could not %s', action)
            raise RepositoryError(f'Could not {action}.') from exc

    def get_links_by_slot_id(self, slot_id: int) -> list[Schedule]:
        try:
            return self.db.query(Schedule).filter(Schedule.slot_id == slot_id).all()
        except SQLAlchemyError as exc:
            logger.exception('Could not retrieve schedules where slot_id = %s', slot_id)
            raise RepositoryError('Could not retrieve schedules.') from exc

    def get_links_by_event_id(self, event_id: int) -> list[Schedule]:
        try:
            return self.db.query(Schedule).filter(Schedule.event_id == event_id).all()
        except SQLAlchemyError as exc:
            logger.exception('Could not retrieve schedules where event_id = %s', event_id)
            raise RepositoryError('Could not retrieve schedules.') from exc

    def get_booked_links(self, slot_ids: Iterable[int], day: date) -> list[Schedule]:
        ids = list(slot_ids)
        if not ids:
            return []

        try:
            return self.db.query(Schedule).filter(
                Schedule.slot_id.in_(ids),
                Schedule.date == day,
            ).all()
        except SQLAlchemyError as exc:
            logger.exception('Could not retrieve schedules on %s for slots %s', day, ids)
            raise RepositoryError('Could not retrieve schedules.') from exc

    def create_links(self, event_id: int, day: date, slot_ids: Iterable[int]) -> list[Schedule]:
        links = [Schedule(slot_id=slot_id, event_id=event_id, date=day) for slot_id in slot_ids]
        self.db.add_all(links)
        self._flush(f'create schedules for event {event_id}')
        return links

    def update_links(self, links: list[Schedule], day: date) -> None:
        for link in links:
            link.date = day
        self._flush('update schedules')

    def delete_links(self, links: list[Schedule]) -> None:
        for link in links:
            self.db.delete(link)
        self._flush('delete schedules')

    def commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise LinkConflictError('Slot is already booked.') from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Could not commit schedule changes')
            raise RepositoryError('Could not save schedules.') from exc

    def rollback(self) -> None:
        self.db.rollback()
