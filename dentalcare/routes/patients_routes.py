from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dentalcare.models.patient import Patient
from dentalcare.routes.dependencies import database_unavailable, ensure_database_ready, get_db

router = APIRouter(tags=['patients'])


class CreatePatientRequest(BaseModel):
    patient_id: str
    name: str
    email: str
    phone_number: str | None = None
    date_of_birth: date | None = None
    gender: str | None = None

    @field_validator('patient_id', 'name')
    @classmethod
    def validate_required(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Patient id and name are required.')
        return normalized

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if '@' not in normalized:
            raise ValueError('A valid email address is required.')
        return normalized


class PatientResponse(BaseModel):
    patient_id: str
    name: str
    email: str | None = None
    phone_number: str | None = None
    date_of_birth: date | None = None
    gender: str | None = None

    class Config:
        from_attributes = True


def get_patient_or_404(db: Session, patient_id: str) -> Patient:
    patient = db.query(Patient).filter(Patient.patient_id == patient_id).first()
    if not patient:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Patient not found.',
        )
    return patient


@router.get('', response_model=list[PatientResponse])
def list_patients(db: Session = Depends(get_db)):
    try:
        return db.query(Patient).order_by(Patient.name.asc()).all()
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.get('/{patient_id}', response_model=PatientResponse)
def get_patient(patient_id: str, db: Session = Depends(get_db)):
    try:
        return get_patient_or_404(db, patient_id)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.post('', response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
def create_patient(data: CreatePatientRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        existing = db.query(Patient).filter(
            (Patient.patient_id == data.patient_id) | (Patient.email == data.email)
        ).first()
        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail='A patient with this id or email already exists.',
            )

        patient = Patient(**data.model_dump())
        db.add(patient)
        db.commit()
        db.refresh(patient)

        return patient
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc


@router.delete('/{patient_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_patient(patient_id: str, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        patient = get_patient_or_404(db, patient_id)
        db.delete(patient)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc
