import enum
import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from typing import Awaitable, Callable, Iterable

from dentalcare.scheduling.slots import TimeSlot, WorkingHours, to_window_offset
from dentalcare.scheduling.time_utils import MINUTES_PER_DAY, parse_time_of_day

logger = logging.getLogger(__name__)


class SlotState(str, enum.Enum):
    AVAILABLE = 'available'
    BOOKED = 'booked'
    BLOCKED = 'blocked'
    USER_BOOKED = 'user-booked'


@dataclass(frozen=True)
class BusyRange:
    """An occupied interval on a dentist's calendar for one date.

    Appointments carry the booking patient's id; dentist-initiated blocks and
    blocked dates have none.
    """

    start: int
    end: int
    client_id: str | None = None

    @classmethod
    def from_times(cls, time_from: str | time, time_to: str | time, client_id: str | None = None) -> 'BusyRange':
        start = parse_time_of_day(time_from)
        end = parse_time_of_day(time_to)
        if end <= start:
            end += MINUTES_PER_DAY
        return cls(start=start, end=end, client_id=client_id)

    def on_window(self, working_hours: WorkingHours) -> 'BusyRange':
        """Move the range onto the working window's timeline.

        In an overnight window, slots after midnight sit above minute 1440; a
        booking stored as 01:00 on the same date has to be compared there too.
        """
        start = to_window_offset(self.start, working_hours)
        return replace(self, start=start, end=start + (self.end - self.start))


def overlaps(first_start: int, first_end: int, second_start: int, second_end: int) -> bool:
    return first_start < second_end and second_start < first_end


def slot_overlaps(slot: TimeSlot, busy_range: BusyRange) -> bool:
    return overlaps(slot.start, slot.end, busy_range.start, busy_range.end)


def slot_start_datetime(slot: TimeSlot, day: date) -> datetime:
    return datetime.combine(day, time(0, 0)) + timedelta(minutes=slot.start)


def is_past_slot(slot: TimeSlot, day: date, now: datetime) -> bool:
    return slot_start_datetime(slot, day) < now


def filter_available(
    slots: Iterable[TimeSlot],
    day: date,
    appointments: Iterable[BusyRange],
    blocked_ranges: Iterable[BusyRange],
    now: datetime,
) -> list[TimeSlot]:
    busy = [*appointments, *blocked_ranges]
    return [
        slot
        for slot in slots
        if not is_past_slot(slot, day, now)
        and not any(slot_overlaps(slot, busy_range) for busy_range in busy)
    ]


def classify_slot(
    slot: TimeSlot,
    day: date,
    busy_ranges: Iterable[BusyRange],
    now: datetime,
    caller_id: str | None = None,
) -> SlotState:
    if is_past_slot(slot, day, now):
        return SlotState.BLOCKED

    conflicting = [busy_range for busy_range in busy_ranges if slot_overlaps(slot, busy_range)]
    if not conflicting:
        return SlotState.AVAILABLE

    if caller_id is not None and any(busy_range.client_id == caller_id for busy_range in conflicting):
        return SlotState.USER_BOOKED
    if any(busy_range.client_id is not None for busy_range in conflicting):
        return SlotState.BOOKED
    return SlotState.BLOCKED


def classify_slots(
    slots: Iterable[TimeSlot],
    day: date,
    busy_ranges: Iterable[BusyRange],
    now: datetime,
    caller_id: str | None = None,
) -> list[tuple[TimeSlot, SlotState]]:
    busy = list(busy_ranges)
    return [(slot, classify_slot(slot, day, busy, now, caller_id)) for slot in slots]


BusyFetch = Callable[[], tuple[Iterable[BusyRange], Iterable[BusyRange]]]


def _log_fail_open(day: date) -> None:
    logger.exception('Could not load existing appointments for %s, showing all candidate slots.', day)


def resolve_available_slots(
    slots: Iterable[TimeSlot],
    day: date,
    fetch_busy: BusyFetch,
    now: datetime,
) -> tuple[list[TimeSlot], bool]:
    """Filter ``slots`` with busy ranges from ``fetch_busy``.

    ``fetch_busy`` returns ``(appointments, blocked_ranges)``. If it raises,
    the unfiltered candidates are returned so booking stays possible. The
    second element of the result is True when that fallback was taken.
    """
    candidates = list(slots)
    try:
        appointments, blocked_ranges = fetch_busy()
    except Exception:
        _log_fail_open(day)
        return candidates, True

    return filter_available(candidates, day, appointments, blocked_ranges, now), False


async def resolve_available_slots_async(
    slots: Iterable[TimeSlot],
    day: date,
    fetch_busy: Callable[[], Awaitable[tuple[Iterable[BusyRange], Iterable[BusyRange]]]],
    now: datetime,
) -> tuple[list[TimeSlot], bool]:
    """Same as ``resolve_available_slots`` for a coroutine ``fetch_busy``."""
    candidates = list(slots)
    try:
        appointments, blocked_ranges = await fetch_busy()
    except Exception:
        _log_fail_open(day)
        return candidates, True

    return filter_available(candidates, day, appointments, blocked_ranges, now), False


def resolve_slot_states(
    slots: Iterable[TimeSlot],
    day: date,
    fetch_busy: BusyFetch,
    now: datetime,
    caller_id: str | None = None,
) -> tuple[list[tuple[TimeSlot, SlotState]], bool]:
    """Classify ``slots`` with busy ranges from ``fetch_busy``, failing open.

    Without busy ranges every slot is classified against an empty calendar,
    so only past slots come back as blocked.
    """
    candidates = list(slots)
    try:
        appointments, blocked_ranges = fetch_busy()
    except Exception:
        _log_fail_open(day)
        return classify_slots(candidates, day, [], now), True

    return classify_slots(candidates, day, [*appointments, *blocked_ranges], now, caller_id), False
