from datetime import date, datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dentalcare.auth.dependencies import get_optional_patient
from dentalcare.models.patient import Patient
from dentalcare.routes.dentists_routes import get_dentist_or_404
from dentalcare.routes.dependencies import database_unavailable, get_db
from dentalcare.scheduling.availability import (
    SlotState,
    resolve_available_slots,
    resolve_slot_states,
)
from dentalcare.scheduling.slots import TimeSlot, WorkingHours, generate_slots, is_working_day
from dentalcare.services.calendar_service import load_busy_ranges, working_hours_for

router = APIRouter(tags=['availability'])


def current_time() -> datetime:
    return datetime.now()


def busy_range_loader(db: Session, dentist_id: str, day: date, working_hours: WorkingHours):
    def fetch_busy():
        try:
            return load_busy_ranges(db, dentist_id, day, working_hours)
        except SQLAlchemyError:
            db.rollback()
            raise

    return fetch_busy


class SlotResponse(BaseModel):
    start: str
    end: str
    label: str
    state: SlotState = SlotState.AVAILABLE

    @classmethod
    def from_slot(cls, slot: TimeSlot, state: SlotState = SlotState.AVAILABLE) -> 'SlotResponse':
        return cls(start=slot.start_label, end=slot.end_label, label=slot.label, state=state)


class SlotListResponse(BaseModel):
    dentist_id: str
    date: date
    duration_minutes: int
    is_working_day: bool
    degraded: bool = False
    sequence: int | None = None
    slots: list[SlotResponse]


@router.get('/dentists/{dentist_id}/slots', response_model=SlotListResponse)
def list_available_slots(
    dentist_id: str,
    day: date = Query(..., alias='date'),
    sequence: int | None = Query(default=None, ge=0),
    db: Session = Depends(get_db),
):
    try:
        dentist = get_dentist_or_404(db, dentist_id)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc

    working_hours = working_hours_for(dentist)
    working_day = is_working_day(day, working_hours)
    candidates = generate_slots(working_hours, day)

    available, degraded = resolve_available_slots(
        candidates,
        day,
        busy_range_loader(db, dentist.dentist_id, day, working_hours),
        current_time(),
    )

    return SlotListResponse(
        dentist_id=dentist.dentist_id,
        date=day,
        duration_minutes=working_hours.duration_minutes,
        is_working_day=working_day,
        degraded=degraded,
        sequence=sequence,
        slots=[SlotResponse.from_slot(slot) for slot in available],
    )


@router.get('/dentists/{dentist_id}/calendar', response_model=SlotListResponse)
def list_calendar_slots(
    dentist_id: str,
    day: date = Query(..., alias='date'),
    sequence: int | None = Query(default=None, ge=0),
    patient: Patient | None = Depends(get_optional_patient),
    db: Session = Depends(get_db),
):
    try:
        dentist = get_dentist_or_404(db, dentist_id)
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc

    working_hours = working_hours_for(dentist)
    candidates = generate_slots(working_hours, day)
    classified, degraded = resolve_slot_states(
        candidates,
        day,
        busy_range_loader(db, dentist.dentist_id, day, working_hours),
        current_time(),
        caller_id=patient.patient_id if patient else None,
    )

    return SlotListResponse(
        dentist_id=dentist.dentist_id,
        date=day,
        duration_minutes=working_hours.duration_minutes,
        is_working_day=is_working_day(day, working_hours),
        degraded=degraded,
        sequence=sequence,
        slots=[SlotResponse.from_slot(slot, state) for slot, state in classified],
    )
