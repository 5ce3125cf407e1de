from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from dentalcare.database import SessionLocal, ensure_appointment_schema, ensure_blocked_date_schema
from dentalcare.scheduling.time_utils import to_time

DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and database credentials.'


def database_unavailable(exc: SQLAlchemyError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=DATABASE_UNAVAILABLE_DETAIL,
    )


def ensure_database_ready() -> None:
    try:
        ensure_appointment_schema()
        ensure_blocked_date_schema()
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def coerce_time_of_day(value):
    """Accept "HH:MM", "HH:MM:SS" or "H:MM AM/PM" in request bodies."""
    if isinstance(value, str):
        if not value.strip():
            raise ValueError('Time is required.')
        return to_time(value)
    return value
