from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from homecare.auth.dependencies import get_db, require_role
from homecare.core import roles
from homecare.models.user import User
from homecare.repositories.event_repository import EventRepository
from homecare.repositories.schedule_repository import ScheduleRepository
from homecare.repositories.slot_repository import SlotRepository
from homecare.routes.common import ensure_database_ready, repository_failure
from homecare.routes.event_routes import EventResponse
from homecare.scheduling.outcomes import RepositoryError

router = APIRouter(tags=['schedules'])


@router.get('/scheduled-event', response_model=EventResponse | None)
def find_scheduled_event(
    slot_id: int = Query(...),
    date: date = Query(...),
    current_user: User = Depends(require_role(roles.WORKER)),
    db: Session = Depends(get_db),
):
    """Return the event booked on ``slot_id`` for ``date``, or nothing when the occurrence is free."""
    ensure_database_ready()

    try:
        slot = SlotRepository(db).get_slot_by_id(slot_id)
        if slot is None or slot.worker_id != current_user.id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail='Availability not found.',
            )

        links = ScheduleRepository(db).get_links_by_slot_id(slot_id)
    except RepositoryError as exc:
        raise repository_failure('retrieve schedules', exc) from exc

    link = next((link for link in links if link.date == date), None)
    if link is None:
        return None
    return link.event


@router.delete('', status_code=status.HTTP_204_NO_CONTENT)
def delete_schedules_by_event(
    event_id: int = Query(...),
    current_user: User = Depends(require_role(roles.WORKER)),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    ledger = ScheduleRepository(db)

    try:
        event = EventRepository(db).get_event_by_id(event_id)
        if event is None or event.worker_id != current_user.id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail='Event not found.',
            )

        ledger.delete_links(ledger.get_links_by_event_id(event_id))
        ledger.commit()
    except RepositoryError as exc:
        ledger.rollback()
        raise repository_failure('delete schedules', exc) from exc
