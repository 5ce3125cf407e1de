"""Time-of-day and weekday helpers shared by the slot generator and the routes.

Every time value is normalized to minutes since midnight as soon as it enters
the scheduling code.
"""

import re
from datetime import date, time

MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * MINUTES_PER_HOUR
DEFAULT_DURATION_MINUTES = 30

WEEKDAYS = ('Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday')

_NON_CLOCK_CHARACTERS = re.compile(r'[^\d:]')
_FIRST_INTEGER = re.compile(r'\d+')
_PM_MARKER = re.compile(r'PM', re.IGNORECASE)
_AM_MARKER = re.compile(r'AM', re.IGNORECASE)


def _to_int(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0


def parse_time_of_day(value: str | time) -> int:
    """Return minutes since midnight for "HH:MM", "HH:MM:SS" or "H:MM AM/PM".

    Characters other than digits and colons are ignored, so "9:00 AM" and
    "09:00:00" both read as 540. Missing hour or minute parts count as zero.
    """
    if isinstance(value, time):
        return value.hour * MINUTES_PER_HOUR + value.minute

    raw = (value or '').strip()
    is_pm = bool(_PM_MARKER.search(raw))
    is_am = bool(_AM_MARKER.search(raw))

    parts = _NON_CLOCK_CHARACTERS.sub('', raw).split(':')
    hours = _to_int(parts[0])
    minutes = _to_int(parts[1]) if len(parts) > 1 else 0

    if is_pm and hours != 12:
        hours += 12
    elif is_am and hours == 12:
        hours = 0

    return hours * MINUTES_PER_HOUR + minutes


def parse_duration_minutes(value: str | int | None, default: int = DEFAULT_DURATION_MINUTES) -> int:
    """Extract the first integer from values such as "30 minutes".

    Non-positive or unreadable durations fall back to ``default``.
    """
    if isinstance(value, int):
        minutes = value
    else:
        match = _FIRST_INTEGER.search(value or '')
        minutes = int(match.group()) if match else 0

    if minutes <= 0:
        return default
    return minutes


def format_minutes(minutes: int) -> str:
    """Format minutes as zero-padded "HH:MM", wrapping past midnight."""
    hours = (minutes // MINUTES_PER_HOUR) % 24
    return f'{hours:02d}:{minutes % MINUTES_PER_HOUR:02d}'


def format_wire_time(minutes: int) -> str:
    return f'{format_minutes(minutes)}:00'


def minutes_to_time(minutes: int) -> time:
    minutes %= MINUTES_PER_DAY
    return time(minutes // MINUTES_PER_HOUR, minutes % MINUTES_PER_HOUR)


def to_time(value: str | time) -> time:
    """Normalize any accepted time-of-day form to a ``datetime.time``."""
    return minutes_to_time(parse_time_of_day(value))


def add_minutes(value: str | time, minutes: int) -> str:
    return format_minutes(parse_time_of_day(value) + minutes)


def weekday_index(name: str | None) -> int | None:
    """Position of a weekday name in the Monday-first ordering."""
    normalized = (name or '').strip().lower()
    for index, weekday in enumerate(WEEKDAYS):
        if weekday.lower() == normalized:
            return index
    return None


def weekday_name(day: date) -> str:
    # isoweekday() is 1 for Monday and 7 for Sunday.
    return WEEKDAYS[day.isoweekday() - 1]
