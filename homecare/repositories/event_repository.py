import logging
from datetime import date, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from homecare.models.event import Event
from homecare.scheduling.outcomes import RepositoryError

logger = logging.getLogger(__name__)


class EventRepository:
    """Events are staged on the session; ``ScheduleRepository.commit`` saves them with their links."""

    def __init__(self, db: Session):
        self.db = db

    def get_event_by_id(self, event_id: int) -> Event | None:
        try:
            return self.db.get(Event, event_id)
        except SQLAlchemyError as exc:
            logger.exception('Could not retrieve event %s', event_id)
            raise RepositoryError('Could not retrieve event.') from exc

    def get_week_events_for_patient(self, patient_id: int, monday: date) -> list[Event]:
        sunday = monday + timedelta(days=6)
        try:
            return self.db.query(Event).filter(
                Event.patient_id == patient_id,
                Event.date >= monday,
                Event.date <= sunday,
            ).order_by(Event.date.asc(), Event.from_time.asc()).all()
        except SQLAlchemyError as exc:
            logger.exception('Could not retrieve events for patient %s from %s', patient_id, monday)
            raise RepositoryError("Could not retrieve week's events.") from exc

    def get_week_events_for_worker(self, worker_id: int, monday: date) -> list[Event]:
        sunday = monday + timedelta(days=6)
        try:
            return self.db.query(Event).filter(
                Event.worker_id == worker_id,
                Event.date >= monday,
                Event.date <= sunday,
            ).order_by(Event.date.asc(), Event.from_time.asc()).all()
        except SQLAlchemyError as exc:
            logger.exception('Could not retrieve events for worker %s from %s', worker_id, monday)
            raise RepositoryError("Could not retrieve week's events.") from exc

    def add_event(self, event: Event) -> Event:
        try:
            self.db.add(event)
            self.db.flush()
        except SQLAlchemyError as exc:
            logger.exception('Could not create event for patient %s', event.patient_id)
            raise RepositoryError('Could not create event.') from exc
        return event

    def delete_event(self, event: Event) -> None:
        try:
            self.db.delete(event)
            self.db.flush()
        except SQLAlchemyError as exc:
            logger.exception('Could not delete event %s', event.id)
            raise RepositoryError('Could not delete event.') from exc
