from datetime import date, time
from datetime import date as date_type

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator, model_validator
from sqlalchemy.orm import Session

from homecare.auth.dependencies import get_current_user, get_db, require_role
from homecare.core import roles
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
from homecare.scheduling.slots import (
    SLOT_INCREMENT_MINUTES,
    DayOfWeek,
    add_increment,
    day_of_week_for,
    is_on_increment,
)
from homecare.services import booking

router = APIRouter(tags=['availability'])

NOT_CONTINUOUS_DETAIL = "The worker's availability does not cover the requested time."


class CreateAvailabilityRequest(BaseModel):
    from_time: time
    day_of_week: DayOfWeek | None = None
    date: date_type | None = None

    @field_validator('from_time')
    @classmethod
    def validate_from_time(cls, value: time) -> time:
        if not is_on_increment(value):
            raise ValueError(f'Availability must start on {SLOT_INCREMENT_MINUTES}-minute boundaries.')
        if add_increment(value) <= value:
            raise ValueError('Availability must end on the same day it starts.')
        return value

    @model_validator(mode='after')
    def resolve_day_of_week(self):
        if self.date is not None:
            derived = day_of_week_for(self.date)
            if self.day_of_week is not None and self.day_of_week != derived:
                raise ValueError('Day of week does not match the date.')
            self.day_of_week = derived
        elif self.day_of_week is None:
            raise ValueError('Either a day of week or a date is required.')
        return self


class AvailabilityResponse(BaseModel):
    id: int
    from_time: time
    to_time: time
    day_of_week: DayOfWeek
    date: date_type | None = None
    worker_id: int

    class Config:
        from_attributes = True


class WeekAvailabilityResponse(BaseModel):
    recurring: list[AvailabilityResponse]
    dated: list[AvailabilityResponse]


class AvailabilityCheckRequest(EventWindowRequest):
    worker_id: int


class UpdateCheckRequest(EventWindowRequest):
    event_id: int


class ReservationResponse(BaseModel):
    slot_ids: list[int]


class ScheduleDeltaResponse(BaseModel):
    for_create: list[int]
    for_delete: list[int]
    for_update: list[int]


@router.get('/week', response_model=WeekAvailabilityResponse)
def get_week_availability(
    worker_id: int = Query(...),
    monday: date = Query(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    require_monday(monday)
    if current_user.role == roles.PATIENT and current_user.worker_id != worker_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Patients can only view their own worker's availability.",
        )

    ensure_database_ready()

    try:
        recurring, dated = SlotRepository(db).get_week_slots(worker_id, monday)
    except RepositoryError as exc:
        raise repository_failure("retrieve week's availability", exc) from exc

    return WeekAvailabilityResponse(
        recurring=[AvailabilityResponse.model_validate(slot) for slot in recurring],
        dated=[AvailabilityResponse.model_validate(slot) for slot in dated],
    )


@router.post('', response_model=AvailabilityResponse, status_code=status.HTTP_201_CREATED)
def create_availability(
    data: CreateAvailabilityRequest,
    current_user: User = Depends(require_role(roles.WORKER)),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    slots = SlotRepository(db)

    try:
        existing = slots.find_matching_slot(current_user.id, data.day_of_week, data.date, data.from_time)
        if existing is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail='This availability already exists.',
            )

        slot = slots.create_slot(
            worker_id=current_user.id,
            day_of_week=data.day_of_week,
            day=data.date,
            from_time=data.from_time,
            to_time=add_increment(data.from_time),
        )
    except RepositoryError as exc:
        raise repository_failure('create availability', exc) from exc

    return AvailabilityResponse.model_validate(slot)


@router.delete('/{slot_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_availability(
    slot_id: int,
    current_user: User = Depends(require_role(roles.WORKER)),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    slots = SlotRepository(db)

    try:
        slot = slots.get_slot_by_id(slot_id)
        if slot is None or slot.worker_id != current_user.id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail='Availability not found.',
            )

        if ScheduleRepository(db).get_links_by_slot_id(slot_id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail='This availability is booked by an event.',
            )

        slots.delete_slot(slot_id)
    except RepositoryError as exc:
        raise repository_failure('delete availability', exc) from exc


@router.post('/check', response_model=ReservationResponse)
def check_availability_for_create(
    data: AvailabilityCheckRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    outcome = booking.check_and_reserve(SlotRepository(db), ScheduleRepository(db), data.worker_id, data.window)
    raise_for_outcome(outcome.status, NOT_CONTINUOUS_DETAIL, 'Something went wrong when checking availability.')

    return ReservationResponse(slot_ids=outcome.slot_ids)


@router.post('/check-update', response_model=ScheduleDeltaResponse)
def check_availability_for_update(
    data: UpdateCheckRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        event = EventRepository(db).get_event_by_id(data.event_id)
    except RepositoryError as exc:
        raise repository_failure('retrieve event', exc) from exc

    if event is None or current_user.id not in (event.patient_id, event.worker_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Event not found.',
        )

    plan = booking.plan_update(
        SlotRepository(db),
        ScheduleRepository(db),
        event.id,
        event.worker_id,
        booking.window_of(event),
        data.window,
    )
    raise_for_outcome(plan.status, NOT_CONTINUOUS_DETAIL, 'Something went wrong when checking availability.')

    return ScheduleDeltaResponse(
        for_create=plan.for_create,
        for_delete=plan.for_delete,
        for_update=plan.for_update,
    )
