import logging
from datetime import date, datetime, time

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dentalcare.models.appointment import Appointment
from dentalcare.routes.dentists_routes import get_dentist_or_404
from dentalcare.routes.dependencies import (
    coerce_time_of_day,
    database_unavailable,
    ensure_database_ready,
    get_db,
)
from dentalcare.routes.patients_routes import get_patient_or_404
from dentalcare.scheduling.availability import is_past_slot
from dentalcare.scheduling.slots import TimeSlot, fits_working_window, is_working_day, to_window_offset
from dentalcare.scheduling.time_utils import MINUTES_PER_DAY, minutes_to_time, parse_time_of_day
from dentalcare.services.calendar_service import (
    find_conflicting_appointment,
    find_conflicting_block,
    working_hours_for,
)

router = APIRouter(tags=['appointments'])

logger = logging.getLogger(__name__)

MAX_APPOINTMENT_NOTE_LENGTH = 600
APPOINTMENT_STATUSES = {'pending', 'confirmed', 'completed', 'cancelled'}
PAYMENT_STATUSES = {'not-paid', 'pending', 'paid', 'overdue'}


def current_time() -> datetime:
    return datetime.now()


class CreateAppointmentRequest(BaseModel):
    dentist_id: str
    patient_id: str | None = None
    date: date
    time_from: time
    time_to: time | None = None
    fee: str | None = None
    note: str | None = None
    status: str = 'pending'

    @field_validator('time_from', 'time_to', mode='before')
    @classmethod
    def normalize_times(cls, value):
        return coerce_time_of_day(value)

    @field_validator('dentist_id')
    @classmethod
    def validate_dentist_id(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Dentist id is required.')
        return normalized

    @field_validator('patient_id')
    @classmethod
    def validate_patient_id(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator('note')
    @classmethod
    def validate_note(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > MAX_APPOINTMENT_NOTE_LENGTH:
            raise ValueError(f'Notes must be {MAX_APPOINTMENT_NOTE_LENGTH} characters or fewer.')

        return normalized

    @field_validator('status')
    @classmethod
    def validate_status(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in APPOINTMENT_STATUSES:
            raise ValueError('Invalid appointment status.')
        return normalized


class UpdateAppointmentStatusRequest(BaseModel):
    status: str | None = None
    payment_status: str | None = None

    @field_validator('status')
    @classmethod
    def validate_status(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip().lower()
        if normalized not in APPOINTMENT_STATUSES:
            raise ValueError('Invalid appointment status.')
        return normalized

    @field_validator('payment_status')
    @classmethod
    def validate_payment_status(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip().lower()
        if normalized not in PAYMENT_STATUSES:
            raise ValueError('Invalid payment status.')
        return normalized


class AppointmentResponse(BaseModel):
    appointment_id: int
    dentist_id: str
    patient_id: str | None = None
    date: date
    time_from: time
    time_to: time
    fee: str | None = None
    note: str | None = None
    status: str | None = None
    payment_status: str | None = None

    class Config:
        from_attributes = True


def get_appointment_or_404(db: Session, appointment_id: int) -> Appointment:
    appointment = db.query(Appointment).filter(Appointment.appointment_id == appointment_id).first()
    if not appointment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Appointment not found.',
        )
    return appointment


@router.get('', response_model=list[AppointmentResponse])
def list_appointments(
    dentist_id: str | None = Query(default=None),
    day: date | None = Query(default=None, alias='date'),
    db: Session = Depends(get_db),
):
    try:
        query = db.query(Appointment)
        if dentist_id:
            query = query.filter(Appointment.dentist_id == dentist_id)
        if day:
            query = query.filter(Appointment.date == day)
        return query.order_by(Appointment.date.asc(), Appointment.time_from.asc()).all()
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.get('/dentist/{dentist_id}', response_model=list[AppointmentResponse])
def list_dentist_appointments(dentist_id: str, db: Session = Depends(get_db)):
    try:
        return db.query(Appointment).filter(
            Appointment.dentist_id == dentist_id,
        ).order_by(Appointment.date.asc(), Appointment.time_from.asc()).all()
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.get('/patient/{patient_id}', response_model=list[AppointmentResponse])
def list_patient_appointments(patient_id: str, db: Session = Depends(get_db)):
    try:
        return db.query(Appointment).filter(
            Appointment.patient_id == patient_id,
        ).order_by(Appointment.date.asc(), Appointment.time_from.asc()).all()
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.get('/{appointment_id}', response_model=AppointmentResponse)
def get_appointment(appointment_id: int, db: Session = Depends(get_db)):
    try:
        return get_appointment_or_404(db, appointment_id)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.post('', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(data: CreateAppointmentRequest, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        dentist = get_dentist_or_404(db, data.dentist_id)
        if data.patient_id is not None:
            get_patient_or_404(db, data.patient_id)

        working_hours = working_hours_for(dentist)
        clock_start = parse_time_of_day(data.time_from)
        if data.time_to is None:
            length = working_hours.duration_minutes
        else:
            length = parse_time_of_day(data.time_to) - clock_start
            if length <= 0:
                length += MINUTES_PER_DAY

        # Past-midnight times of an overnight window belong to the next calendar day.
        start = to_window_offset(clock_start, working_hours)
        end = start + length

        if is_past_slot(TimeSlot(start, end), data.date, current_time()):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail='Appointments cannot be booked in the past.',
            )

        if not is_working_day(data.date, working_hours):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail='The selected date is not a working day for this dentist.',
            )

        if not fits_working_window(start, end, working_hours):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail='Appointment is outside the dentist\'s working hours.',
            )

        if find_conflicting_block(db, dentist.dentist_id, data.date, start, end, working_hours):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail='This time is blocked.',
            )

        if find_conflicting_appointment(db, dentist.dentist_id, data.date, start, end, working_hours):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail='This time is already booked.',
            )

        appointment = Appointment(
            dentist_id=dentist.dentist_id,
            patient_id=data.patient_id,
            date=data.date,
            time_from=minutes_to_time(start),
            time_to=minutes_to_time(end),
            fee=data.fee or dentist.appointment_fee,
            note=data.note,
            status=data.status,
            payment_status='not-paid',
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)

        logger.info(
            'Booked appointment %s with dentist %s on %s at %s.',
            appointment.appointment_id,
            appointment.dentist_id,
            appointment.date,
            appointment.time_from,
        )
        return appointment
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc


@router.put('/{appointment_id}/status', response_model=AppointmentResponse)
def update_appointment_status(
    appointment_id: int,
    data: UpdateAppointmentStatusRequest,
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        appointment = get_appointment_or_404(db, appointment_id)
        if data.status is not None:
            appointment.status = data.status
        if data.payment_status is not None:
            appointment.payment_status = data.payment_status
        db.commit()
        db.refresh(appointment)

        return appointment
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc


@router.delete('/{appointment_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_appointment(appointment_id: int, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        appointment = get_appointment_or_404(db, appointment_id)
        db.delete(appointment)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc
