from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from dentalcare.models.dentist import Dentist
from dentalcare.routes.dependencies import database_unavailable, ensure_database_ready, get_db
from dentalcare.scheduling.time_utils import format_wire_time, parse_time_of_day, weekday_index

router = APIRouter(tags=['dentists'])

DUPLICATE_EMAIL_DETAIL = 'A dentist with this email already exists.'


def _normalize_weekday(value: str | None) -> str | None:
    if value is None:
        return None
    index = weekday_index(value)
    if index is None:
        raise ValueError('Working days must be weekday names such as Monday.')
    return value.strip().capitalize()


def _normalize_work_time(value: str | None) -> str | None:
    if value is None:
        return None
    if not value.strip():
        raise ValueError('Working time is required.')
    return format_wire_time(parse_time_of_day(value))


class DentistFields(BaseModel):
    name: str | None = None
    email: str | None = None
    phone_number: str | None = None
    specialization: str | None = None
    work_days_from: str | None = None
    work_days_to: str | None = None
    work_time_from: str | None = None
    work_time_to: str | None = None
    appointment_duration: str | None = None
    appointment_fee: str | None = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip().lower()

    @field_validator('work_days_from', 'work_days_to')
    @classmethod
    def validate_work_days(cls, value: str | None) -> str | None:
        return _normalize_weekday(value)

    @field_validator('work_time_from', 'work_time_to')
    @classmethod
    def validate_work_time(cls, value: str | None) -> str | None:
        return _normalize_work_time(value)


class CreateDentistRequest(DentistFields):
    dentist_id: str
    name: str

    @field_validator('dentist_id', 'name')
    @classmethod
    def validate_required(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Dentist id and name are required.')
        return normalized


class DentistResponse(BaseModel):
    dentist_id: str
    name: str
    email: str | None = None
    phone_number: str | None = None
    specialization: str | None = None
    work_days_from: str | None = None
    work_days_to: str | None = None
    work_time_from: str | None = None
    work_time_to: str | None = None
    appointment_duration: str | None = None
    appointment_fee: str | None = None

    class Config:
        from_attributes = True


class DentistWorkInfoResponse(BaseModel):
    work_time_from: str | None = None
    work_time_to: str | None = None
    work_days_from: str | None = None
    work_days_to: str | None = None
    appointment_duration: str | None = None
    appointment_fee: str | None = None

    class Config:
        from_attributes = True


def get_dentist_or_404(db: Session, dentist_id: str) -> Dentist:
    dentist = db.query(Dentist).filter(Dentist.dentist_id == dentist_id).first()
    if not dentist:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Dentist not found.',
        )
    return dentist


def ensure_email_available(db: Session, email: str | None, dentist_id: str | None = None) -> None:
    if not email:
        return
    query = db.query(Dentist).filter(Dentist.email == email)
    if dentist_id is not None:
        query = query.filter(Dentist.dentist_id != dentist_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=DUPLICATE_EMAIL_DETAIL,
        )


@router.get('', response_model=list[DentistResponse])
def list_dentists(db: Session = Depends(get_db)):
    try:
        return db.query(Dentist).order_by(Dentist.name.asc()).all()
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.get('/count')
def count_dentists(db: Session = Depends(get_db)) -> int:
    try:
        return db.query(Dentist).count()
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.get('/{dentist_id}', response_model=DentistResponse)
def get_dentist(dentist_id: str, db: Session = Depends(get_db)):
    try:
        return get_dentist_or_404(db, dentist_id)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.get('/{dentist_id}/work-info', response_model=DentistWorkInfoResponse)
def get_dentist_work_info(dentist_id: str, db: Session = Depends(get_db)):
    try:
        return get_dentist_or_404(db, dentist_id)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.post('', response_model=DentistResponse, status_code=status.HTTP_201_CREATED)
def create_dentist(data: CreateDentistRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        existing = db.query(Dentist).filter(Dentist.dentist_id == data.dentist_id).first()
        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail='Dentist ID already exists.',
            )
        ensure_email_available(db, data.email)

        dentist = Dentist(**data.model_dump())
        db.add(dentist)
        db.commit()
        db.refresh(dentist)

        return dentist
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail='Dentist ID or email already exists.',
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc


@router.put('/{dentist_id}', response_model=DentistResponse)
def update_dentist(dentist_id: str, data: DentistFields, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        dentist = get_dentist_or_404(db, dentist_id)
        changes = data.model_dump(exclude_unset=True)
        if 'email' in changes:
            ensure_email_available(db, changes['email'], dentist_id=dentist.dentist_id)
        for field_name, value in changes.items():
            setattr(dentist, field_name, value)
        db.commit()
        db.refresh(dentist)

        return dentist
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=DUPLICATE_EMAIL_DETAIL,
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc


@router.delete('/{dentist_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_dentist(dentist_id: str, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        dentist = get_dentist_or_404(db, dentist_id)
        db.delete(dentist)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc
