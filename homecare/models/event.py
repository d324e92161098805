"""Event model definitions."""

from sqlalchemy import Column, Date, ForeignKey, Index, Integer, String, Time
from homecare.database import Base


class Event(Base):
    """Represents an event a patient booked with their worker."""
    __tablename__ = "events"

    id = Column(Integer, primary_key=True)
    from_time = Column(Time, nullable=False)
    to_time = Column(Time, nullable=False)
    date = Column(Date, nullable=False)
    title = Column(String(30), nullable=False)
    location = Column(String(30), nullable=False)
    patient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    worker_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (
        Index("idx_events_patient_date", "patient_id", "date"),
    )
