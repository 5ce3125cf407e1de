from datetime import date, timedelta

import pytest

from dentalcare.scheduling.slots import (
    TimeSlot,
    WorkingHours,
    fits_working_window,
    generate_slots,
    is_working_day,
)


def _hours(start: str, end: str, duration='30', days=('Monday', 'Friday')) -> WorkingHours:
    return WorkingHours.from_strings(start, end, days[0], days[1], duration)


@pytest.mark.parametrize(
    ('start', 'end', 'duration'),
    [
        ('09:00', '17:00', '30'),
        ('08:15', '12:40', '25 minutes'),
        ('9:00 AM', '5:00 PM', '45'),
        ('10:00', '10:50', '20'),
    ],
)
def test_generated_slots_tile_the_window_without_gaps(start: str, end: str, duration: str) -> None:
    working_hours = _hours(start, end, duration)
    slots = generate_slots(working_hours)
    step = working_hours.duration_minutes

    assert slots[0].start == working_hours.start
    for previous, current in zip(slots, slots[1:]):
        assert previous.end == current.start
    for slot in slots:
        assert slot.end - slot.start == step

    expected_count = (working_hours.window_end - working_hours.start) // step
    assert len(slots) == expected_count
    assert slots[-1].end == working_hours.start + step * expected_count
    assert slots[-1].end + step > working_hours.window_end


def test_generate_slots_formats_labels() -> None:
    slots = generate_slots(_hours('09:00', '10:00', '30 minutes'))

    assert [slot.label for slot in slots] == ['09:00 - 09:30', '09:30 - 10:00']


def test_overnight_window_wraps_into_next_day() -> None:
    slots = generate_slots(_hours('22:00', '02:00', '60'))

    assert [(slot.start_label, slot.end_label) for slot in slots] == [
        ('22:00', '23:00'),
        ('23:00', '00:00'),
        ('00:00', '01:00'),
        ('01:00', '02:00'),
    ]


def test_equal_start_and_end_is_a_full_day_window() -> None:
    slots = generate_slots(_hours('08:00', '08:00', '120'))

    assert len(slots) == 12
    assert slots[-1].end_label == '08:00'


def test_unreadable_duration_defaults_to_thirty_minutes() -> None:
    slots = generate_slots(_hours('09:00', '10:00', 'n/a'))

    assert slots == [TimeSlot(540, 570), TimeSlot(570, 600)]


def test_zero_duration_defaults_to_thirty_minutes() -> None:
    slots = generate_slots(WorkingHours(start=540, end=600, work_days_from='Monday', work_days_to='Friday', duration_minutes=0))

    assert slots == [TimeSlot(540, 570), TimeSlot(570, 600)]


def test_window_shorter_than_duration_yields_no_slots() -> None:
    assert generate_slots(_hours('09:00', '09:20', '30')) == []


def test_generate_slots_is_idempotent() -> None:
    working_hours = _hours('9:00 AM', '1:00 PM', '40 minutes')

    first = generate_slots(working_hours)
    second = generate_slots(working_hours)

    assert first == second
    assert first is not second


def test_generate_slots_is_empty_on_non_working_day() -> None:
    working_hours = _hours('09:00', '12:00')

    assert generate_slots(working_hours, date(2026, 1, 10)) == []
    assert len(generate_slots(working_hours, date(2026, 1, 5))) == 6


def test_working_day_range_within_week() -> None:
    working_hours = _hours('09:00', '17:00', days=('Monday', 'Friday'))
    monday = date(2026, 1, 5)

    results = [is_working_day(monday + timedelta(days=offset), working_hours) for offset in range(7)]

    assert results == [True, True, True, True, True, False, False]


def test_working_day_range_wrapping_across_week_boundary() -> None:
    working_hours = _hours('09:00', '17:00', days=('Saturday', 'Monday'))
    monday = date(2026, 1, 5)

    results = {
        (monday + timedelta(days=offset)).strftime('%A'): is_working_day(monday + timedelta(days=offset), working_hours)
        for offset in range(7)
    }

    assert results == {
        'Monday': True,
        'Tuesday': False,
        'Wednesday': False,
        'Thursday': False,
        'Friday': False,
        'Saturday': True,
        'Sunday': True,
    }


def test_single_working_day_and_unknown_names() -> None:
    sunday_only = _hours('09:00', '17:00', days=('Sunday', 'Sunday'))

    assert is_working_day(date(2026, 1, 4), sunday_only) is True
    assert is_working_day(date(2026, 1, 5), sunday_only) is False
    assert is_working_day(date(2026, 1, 5), _hours('09:00', '17:00', days=('', 'Friday'))) is False


def test_fits_working_window_handles_day_and_overnight_windows() -> None:
    day_shift = _hours('09:00', '12:00')
    night_shift = _hours('22:00', '02:00', '60')

    assert fits_working_window(540, 570, day_shift) is True
    assert fits_working_window(690, 720, day_shift) is True
    assert fits_working_window(700, 730, day_shift) is False
    assert fits_working_window(510, 540, day_shift) is False
    assert fits_working_window(60, 120, night_shift) is True
    assert fits_working_window(1380, 0, night_shift) is True
    assert fits_working_window(120, 180, night_shift) is False
