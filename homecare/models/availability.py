"""Availability model definitions."""

from sqlalchemy import Column, Date, ForeignKey, Index, Integer, Time
from homecare.database import Base


class Availability(Base):
    """Represents a 30 minute slot a worker is available for.

    Rows without a date recur every week on ``day_of_week``; rows with a date
    apply to that date only and take precedence over the recurring row that
    starts at the same time.
    """
    __tablename__ = "availability"

    id = Column(Integer, primary_key=True)
    from_time = Column(Time, nullable=False)
    to_time = Column(Time, nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday
    date = Column(Date, nullable=True)
    worker_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (
        Index("idx_availability_worker_day_from", "worker_id", "day_of_week", "from_time"),
        Index("idx_availability_worker_date_from", "worker_id", "date", "from_time"),
    )
