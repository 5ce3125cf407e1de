"""Candidate slot generation from a dentist's working hours."""

from dataclasses import dataclass
from datetime import date, time

from dentalcare.scheduling.time_utils import (
    DEFAULT_DURATION_MINUTES,
    MINUTES_PER_DAY,
    format_minutes,
    parse_duration_minutes,
    parse_time_of_day,
    weekday_index,
    weekday_name,
)


@dataclass(frozen=True)
class TimeSlot:
    """Half-open interval ``[start, end)`` in minutes from the selected date's midnight."""

    start: int
    end: int

    @property
    def start_label(self) -> str:
        return format_minutes(self.start)

    @property
    def end_label(self) -> str:
        return format_minutes(self.end)

    @property
    def label(self) -> str:
        return f'{self.start_label} - {self.end_label}'


@dataclass(frozen=True)
class WorkingHours:
    start: int
    end: int
    work_days_from: str
    work_days_to: str
    duration_minutes: int

    @classmethod
    def from_strings(
        cls,
        work_time_from: str | time,
        work_time_to: str | time,
        work_days_from: str,
        work_days_to: str,
        appointment_duration: str | int | None,
        default_duration_minutes: int = DEFAULT_DURATION_MINUTES,
    ) -> 'WorkingHours':
        return cls(
            start=parse_time_of_day(work_time_from),
            end=parse_time_of_day(work_time_to),
            work_days_from=work_days_from,
            work_days_to=work_days_to,
            duration_minutes=parse_duration_minutes(appointment_duration, default_duration_minutes),
        )

    @property
    def window_end(self) -> int:
        # A window that ends at or before its start runs into the next day.
        if self.end <= self.start:
            return self.end + MINUTES_PER_DAY
        return self.end


def is_working_day(day: date, working_hours: WorkingHours) -> bool:
    from_index = weekday_index(working_hours.work_days_from)
    to_index = weekday_index(working_hours.work_days_to)
    if from_index is None or to_index is None:
        return False

    selected_index = weekday_index(weekday_name(day))

    if from_index <= to_index:
        return from_index <= selected_index <= to_index
    return selected_index >= from_index or selected_index <= to_index


def generate_slots(working_hours: WorkingHours, day: date | None = None) -> list[TimeSlot]:
    """Tile the working window with back-to-back slots of the appointment duration.

    A trailing remainder shorter than one duration is dropped. When ``day`` is
    given and falls outside the working days, no slots are produced.
    """
    if day is not None and not is_working_day(day, working_hours):
        return []

    duration = parse_duration_minutes(working_hours.duration_minutes)
    end = working_hours.window_end

    slots: list[TimeSlot] = []
    current = working_hours.start
    while current + duration <= end:
        slots.append(TimeSlot(start=current, end=current + duration))
        current += duration

    return slots


def to_window_offset(minutes: int, working_hours: WorkingHours) -> int:
    """Place a time of day on the working window's timeline.

    Times before the window start belong to the part of an overnight window
    that falls after midnight.
    """
    if working_hours.end <= working_hours.start and minutes < working_hours.start:
        return minutes + MINUTES_PER_DAY
    return minutes


def fits_working_window(start: int, end: int, working_hours: WorkingHours) -> bool:
    start_offset = to_window_offset(start, working_hours)
    end_offset = start_offset + (end - start if end > start else end + MINUTES_PER_DAY - start)
    return working_hours.start <= start_offset and end_offset <= working_hours.window_end
