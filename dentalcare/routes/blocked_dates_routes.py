from datetime import date, time

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dentalcare.models.blocked_date import BlockedDate
from dentalcare.routes.dentists_routes import get_dentist_or_404
from dentalcare.routes.dependencies import (
    coerce_time_of_day,
    database_unavailable,
    ensure_database_ready,
    get_db,
)
from dentalcare.scheduling.slots import to_window_offset
from dentalcare.scheduling.time_utils import MINUTES_PER_DAY, parse_time_of_day
from dentalcare.services.calendar_service import find_conflicting_block, working_hours_for

router = APIRouter(tags=['blocked-dates'])


class CreateBlockedDateRequest(BaseModel):
    dentist_id: str
    date: date
    time_from: time
    time_to: time

    @field_validator('time_from', 'time_to', mode='before')
    @classmethod
    def normalize_times(cls, value):
        return coerce_time_of_day(value)


class BlockedDateResponse(BaseModel):
    blocked_date_id: int
    dentist_id: str
    date: date
    time_from: time
    time_to: time

    class Config:
        from_attributes = True


@router.get('/dentist/{dentist_id}', response_model=list[BlockedDateResponse])
def list_dentist_blocked_dates(
    dentist_id: str,
    day: date | None = Query(default=None, alias='date'),
    db: Session = Depends(get_db),
):
    try:
        query = db.query(BlockedDate).filter(BlockedDate.dentist_id == dentist_id)
        if day:
            query = query.filter(BlockedDate.date == day)
        return query.order_by(BlockedDate.date.asc(), BlockedDate.time_from.asc()).all()
    except SQLAlchemyError as exc:
        raise database_unavailable(exc) from exc


@router.post('', response_model=BlockedDateResponse, status_code=status.HTTP_201_CREATED)
def create_blocked_date(data: CreateBlockedDateRequest, db: Session = Depends(get_db)):
    start = parse_time_of_day(data.time_from)
    end = parse_time_of_day(data.time_to)
    if end == start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Blocked time must end after it starts.',
        )
    if end < start:
        end += MINUTES_PER_DAY

    ensure_database_ready()

    try:
        dentist = get_dentist_or_404(db, data.dentist_id)
        working_hours = working_hours_for(dentist)
        window_start = to_window_offset(start, working_hours)
        window_end = window_start + (end - start)

        if find_conflicting_block(db, dentist.dentist_id, data.date, window_start, window_end, working_hours):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail='This time is already blocked.',
            )

        blocked_date = BlockedDate(
            dentist_id=dentist.dentist_id,
            date=data.date,
            time_from=data.time_from,
            time_to=data.time_to,
        )
        db.add(blocked_date)
        db.commit()
        db.refresh(blocked_date)

        return blocked_date
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc


@router.delete('/{blocked_date_id}', status_code=status.HTTP_204_NO_CONTENT)
def remove_blocked_date(blocked_date_id: int, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        blocked_date = db.query(BlockedDate).filter(BlockedDate.blocked_date_id == blocked_date_id).first()

        if not blocked_date:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail='Blocked time not found.',
            )

        db.delete(blocked_date)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable(exc) from exc
