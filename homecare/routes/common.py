import logging
from datetime import date, time

from fastapi import HTTPException, status
from pydantic import BaseModel, field_validator, model_validator
from sqlalchemy.exc import SQLAlchemyError

from homecare.database import ensure_scheduling_schema
from homecare.scheduling.outcomes import OperationStatus, RepositoryError
from homecare.scheduling.slots import SLOT_INCREMENT_MINUTES, TimeWindow, is_on_increment

logger = logging.getLogger(__name__)

DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and database credentials.'


class EventWindowRequest(BaseModel):
    date: date
    from_time: time
    to_time: time

    @field_validator('from_time', 'to_time')
    @classmethod
    def validate_increment(cls, value: time) -> time:
        if not is_on_increment(value):
            raise ValueError(f'Times must be on {SLOT_INCREMENT_MINUTES}-minute boundaries.')
        return value

    @model_validator(mode='after')
    def validate_range(self):
        if self.from_time >= self.to_time:
            raise ValueError('Start time must be before end time.')
        return self

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(date=self.date, from_time=self.from_time, to_time=self.to_time)


def ensure_database_ready() -> None:
    try:
        ensure_scheduling_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


def raise_for_outcome(outcome_status: OperationStatus, not_acceptable_detail: str, error_detail: str) -> None:
    if outcome_status is OperationStatus.OK:
        return

    if outcome_status is OperationStatus.NOT_ACCEPTABLE:
        raise HTTPException(status_code=status.HTTP_406_NOT_ACCEPTABLE, detail=not_acceptable_detail)

    if outcome_status is OperationStatus.NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Not found.')

    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=error_detail)


def require_monday(monday: date) -> date:
    if monday.weekday() != 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Weeks must start on a Monday.',
        )
    return monday


def repository_failure(action: str, exc: RepositoryError) -> HTTPException:
    logger.error('Could not %s: %s', action, exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f'Something went wrong when trying to {action}.',
    )
