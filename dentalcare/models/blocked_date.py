"""Blocked date model definitions."""

from sqlalchemy import Column, Date, ForeignKey, Integer, String, Time
from dentalcare.database import Base


class BlockedDate(Base):
    """Represents a time range a dentist has taken off the booking calendar."""
    __tablename__ = "blocked_dates"

    blocked_date_id = Column(Integer, primary_key=True)
    dentist_id = Column(String, ForeignKey("dentists.dentist_id"), nullable=False)
    date = Column(Date, nullable=False)
    time_from = Column(Time, nullable=False)
    time_to = Column(Time, nullable=False)
