"""Dentist model definitions."""

from sqlalchemy import Column, String
from dentalcare.database import Base


class Dentist(Base):
    """Represents a dentist and the working hours used for slot generation."""
    __tablename__ = "dentists"

    dentist_id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True)
    phone_number = Column(String)
    specialization = Column(String)
    work_days_from = Column(String)  # weekday name, e.g. Monday
    work_days_to = Column(String)
    work_time_from = Column(String)  # "09:00", "09:00:00" or "9:00 AM"
    work_time_to = Column(String)
    appointment_duration = Column(String)  # e.g. "30 minutes"
    appointment_fee = Column(String)
