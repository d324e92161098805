"""User model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, String
from homecare.database import Base


class User(Base):
    """Represents an application user."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True)
    name = Column(String, default="")
    role = Column(String)  # patient/worker/admin
    worker_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)  # patients only
