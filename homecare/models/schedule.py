"""Schedule link model definitions."""

from sqlalchemy import Column, Date, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from homecare.database import Base
from homecare.models.event import Event


class Schedule(Base):
    """Binds one occurrence of an availability slot to an event."""
    __tablename__ = "schedules"

    id = Column(Integer, primary_key=True)
    slot_id = Column(Integer, ForeignKey("availability.id", ondelete="CASCADE"), nullable=False)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False)
    # recurring slots back one occurrence per week, so the date is part of the key
    date = Column(Date, nullable=False)

    event = relationship(Event)

    __table_args__ = (
        UniqueConstraint("slot_id", "date", name="uq_schedules_slot_date"),
        Index("idx_schedules_event", "event_id"),
    )
