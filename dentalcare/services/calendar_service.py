"""Bridge between stored calendar records and the scheduling module.

Stored times are converted to minutes here, so route handlers and the
scheduling functions never deal with raw column values. Every range is placed
on the dentist's working window, so ``start`` and ``end`` passed to the
conflict lookups must already be on that timeline.
"""
from datetime import date

from sqlalchemy import or_
from sqlalchemy.orm import Session

from dentalcare.core import config
from dentalcare.models.appointment import Appointment
from dentalcare.models.blocked_date import BlockedDate
from dentalcare.models.dentist import Dentist
from dentalcare.scheduling.availability import BusyRange, overlaps
from dentalcare.scheduling.slots import WorkingHours

CANCELLED_STATUS = 'cancelled'


def working_hours_for(dentist: Dentist) -> WorkingHours:
    return WorkingHours.from_strings(
        work_time_from=dentist.work_time_from or '',
        work_time_to=dentist.work_time_to or '',
        work_days_from=dentist.work_days_from or '',
        work_days_to=dentist.work_days_to or '',
        appointment_duration=dentist.appointment_duration,
        default_duration_minutes=config.DEFAULT_APPOINTMENT_DURATION_MINUTES,
    )


def appointment_busy_range(appointment: Appointment, working_hours: WorkingHours) -> BusyRange:
    busy_range = BusyRange.from_times(appointment.time_from, appointment.time_to, client_id=appointment.patient_id)
    return busy_range.on_window(working_hours)


def blocked_date_busy_range(blocked_date: BlockedDate, working_hours: WorkingHours) -> BusyRange:
    return BusyRange.from_times(blocked_date.time_from, blocked_date.time_to).on_window(working_hours)


def list_appointments_for_day(db: Session, dentist_id: str, day: date) -> list[Appointment]:
    return db.query(Appointment).filter(
        Appointment.dentist_id == dentist_id,
        Appointment.date == day,
        or_(Appointment.status.is_(None), Appointment.status != CANCELLED_STATUS),
    ).order_by(Appointment.time_from.asc()).all()


def list_blocked_dates_for_day(db: Session, dentist_id: str, day: date) -> list[BlockedDate]:
    return db.query(BlockedDate).filter(
        BlockedDate.dentist_id == dentist_id,
        BlockedDate.date == day,
    ).order_by(BlockedDate.time_from.asc()).all()


def load_busy_ranges(
    db: Session,
    dentist_id: str,
    day: date,
    working_hours: WorkingHours,
) -> tuple[list[BusyRange], list[BusyRange]]:
    """Busy ranges for one date, placed on the dentist's working window timeline."""
    appointments = [
        appointment_busy_range(item, working_hours)
        for item in list_appointments_for_day(db, dentist_id, day)
    ]
    blocked = [
        blocked_date_busy_range(item, working_hours)
        for item in list_blocked_dates_for_day(db, dentist_id, day)
    ]
    return appointments, blocked


def find_conflicting_appointment(
    db: Session,
    dentist_id: str,
    day: date,
    start: int,
    end: int,
    working_hours: WorkingHours,
) -> Appointment | None:
    for appointment in list_appointments_for_day(db, dentist_id, day):
        busy_range = appointment_busy_range(appointment, working_hours)
        if overlaps(start, end, busy_range.start, busy_range.end):
            return appointment
    return None


def find_conflicting_block(
    db: Session,
    dentist_id: str,
    day: date,
    start: int,
    end: int,
    working_hours: WorkingHours,
) -> BlockedDate | None:
    for blocked_date in list_blocked_dates_for_day(db, dentist_id, day):
        busy_range = blocked_date_busy_range(blocked_date, working_hours)
        if overlaps(start, end, busy_range.start, busy_range.end):
            return blocked_date
    return None
