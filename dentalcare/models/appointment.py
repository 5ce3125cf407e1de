"""Appointment model definitions."""

from sqlalchemy import Column, Date, ForeignKey, Integer, String, Time
from dentalcare.database import Base


class Appointment(Base):
    """Represents a booked appointment, or a dentist-held slot when patient_id is empty."""
    __tablename__ = "appointments"

    appointment_id = Column(Integer, primary_key=True)
    patient_id = Column(String, ForeignKey("patients.patient_id"), nullable=True)
    dentist_id = Column(String, ForeignKey("dentists.dentist_id"), nullable=False)
    date = Column(Date, nullable=False)
    time_from = Column(Time, nullable=False)
    time_to = Column(Time, nullable=False)
    fee = Column(String)
    note = Column(String)
    status = Column(String, default="pending")
    payment_status = Column(String, default="not-paid")
