from datetime import date, time

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from homecare.auth.dependencies import get_current_user, get_db, require_role
from homecare.core import roles
from homecare.models.event import Event
from homecare.models.user import User
from homecare.repositories.event_repository import EventRepository
from homecare.repositories.schedule_repository import ScheduleRepository
from homecare.repositories.slot_repository import SlotRepository
from homecare.routes.common import (
    EventWindowRequest,
    ensure_database_ready,
    raise_for_outcome,
    repository_failure,
    require_monday,
)
from homecare.scheduling.outcomes import RepositoryError
from homecare.services import booking

router = APIRouter(tags=['events'])

MAX_TEXT_LENGTH = 30
NO_ROOM_DETAIL = "There is no room in the worker's schedule for this event."


def _normalize_text(value: str, field_name: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError(f'{field_name} is required.')
    if len(normalized) > MAX_TEXT_LENGTH:
        raise ValueError(f'{field_name} must be {MAX_TEXT_LENGTH} characters or fewer.')
    return normalized


class CreateEventRequest(EventWindowRequest):
    title: str
    location: str
    worker_id: int | None = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _normalize_text(value, 'Title')

    @field_validator('location')
    @classmethod
    def validate_location(cls, value: str) -> str:
        return _normalize_text(value, 'Location')


class UpdateEventRequest(EventWindowRequest):
    title: str | None = None
    location: str | None = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str | None) -> str | None:
        return None if value is None else _normalize_text(value, 'Title')

    @field_validator('location')
    @classmethod
    def validate_location(cls, value: str | None) -> str | None:
        return None if value is None else _normalize_text(value, 'Location')


class EventResponse(BaseModel):
    id: int
    date: date
    from_time: time
    to_time: time
    title: str
    location: str
    patient_id: int
    worker_id: int

    class Config:
        from_attributes = True


class BookedEventResponse(EventResponse):
    slot_ids: list[int]


def get_owned_event(event_id: int, current_user: User, db: Session) -> Event:
    try:
        event = EventRepository(db).get_event_by_id(event_id)
    except RepositoryError as exc:
        raise repository_failure('retrieve event', exc) from exc

    if event is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Event not found.',
        )

    if current_user.id not in (event.patient_id, event.worker_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='Only the patient or worker of this event can change it.',
        )

    return event


@router.get('/week', response_model=list[EventResponse])
def list_week_events(
    monday: date = Query(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_monday(monday)
    ensure_database_ready()

    events = EventRepository(db)
    try:
        if current_user.role == roles.WORKER:
            return events.get_week_events_for_worker(current_user.id, monday)
        return events.get_week_events_for_patient(current_user.id, monday)
    except RepositoryError as exc:
        raise repository_failure("retrieve week's events", exc) from exc


@router.post('', response_model=BookedEventResponse, status_code=status.HTTP_201_CREATED)
def create_event(
    data: CreateEventRequest,
    current_user: User = Depends(require_role(roles.PATIENT)),
    db: Session = Depends(get_db),
):
    worker_id = data.worker_id or current_user.worker_id
    if worker_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Patient has no assigned worker.',
        )
    if current_user.worker_id is not None and worker_id != current_user.worker_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='Patients can only book events with their own worker.',
        )

    ensure_database_ready()

    event = Event(
        date=data.date,
        from_time=data.from_time,
        to_time=data.to_time,
        title=data.title,
        location=data.location,
        patient_id=current_user.id,
        worker_id=worker_id,
    )
    outcome = booking.book_event(SlotRepository(db), ScheduleRepository(db), EventRepository(db), event)
    raise_for_outcome(outcome.status, NO_ROOM_DETAIL, 'Something went wrong when creating event.')

    db.refresh(event)
    return BookedEventResponse(
        **EventResponse.model_validate(event).model_dump(),
        slot_ids=outcome.slot_ids,
    )


@router.put('/{event_id}', response_model=EventResponse)
def update_event(
    event_id: int,
    data: UpdateEventRequest,
    current_user: User = Depends(require_role(roles.PATIENT)),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    event = get_owned_event(event_id, current_user, db)

    plan = booking.reschedule_event(
        SlotRepository(db),
        ScheduleRepository(db),
        event,
        data.window,
        title=data.title,
        location=data.location,
    )
    raise_for_outcome(plan.status, NO_ROOM_DETAIL, 'Something went wrong when updating event.')

    db.refresh(event)
    return event


@router.delete('/{event_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: int,
    current_user: User = Depends(require_role(roles.PATIENT, roles.WORKER)),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    event = get_owned_event(event_id, current_user, db)

    outcome_status = booking.release_event(ScheduleRepository(db), EventRepository(db), event)
    raise_for_outcome(outcome_status, NO_ROOM_DETAIL, 'Something went wrong when deleting event.')
