"""Patient model definitions."""

from sqlalchemy import Column, Date, String
from dentalcare.database import Base


class Patient(Base):
    """Represents a clinic patient."""
    __tablename__ = "patients"

    patient_id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True)
    phone_number = Column(String)
    date_of_birth = Column(Date)
    gender = Column(String)
