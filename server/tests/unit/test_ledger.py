"""Unit tests for the day-granular reservation ledger."""

from datetime import date
from uuid import uuid4

from rentals.models.booking import BookingStatus
from rentals.repositories.base import BookingLine
from rentals.services.ledger import build_day_table, first_shortfall, peak_day, reserved_on_day


def _line(start: date, end: date, quantity: int) -> BookingLine:
    return BookingLine(
        booking_id=uuid4(),
        item_id=uuid4(),
        quantity=quantity,
        start_date=start,
        end_date=end,
        status=BookingStatus.CONFIRMED,
    )


def test_single_day_booking_occupies_exactly_one_day():
    lines = [_line(date(2025, 11, 15), date(2025, 11, 15), 5)]

    assert reserved_on_day(lines, date(2025, 11, 15)) == 5
    assert reserved_on_day(lines, date(2025, 11, 14)) == 0
    assert reserved_on_day(lines, date(2025, 11, 16)) == 0


def test_overlapping_lines_accumulate():
    lines = [
        _line(date(2025, 11, 20), date(2025, 11, 25), 40),
        _line(date(2025, 11, 22), date(2025, 11, 27), 50),
    ]

    table = build_day_table(lines, 100, date(2025, 11, 23), date(2025, 11, 23))

    assert len(table) == 1
    assert table[0].reserved == 90
    assert table[0].available == 10


def test_day_table_is_inclusive_on_both_ends():
    table = build_day_table([], 7, date(2025, 12, 10), date(2025, 12, 15))

    assert [entry.day for entry in table][0] == date(2025, 12, 10)
    assert [entry.day for entry in table][-1] == date(2025, 12, 15)
    assert len(table) == 6
    assert all(entry.available == 7 for entry in table)


def test_oversubscribed_day_reports_negative_availability():
    lines = [_line(date(2025, 11, 1), date(2025, 11, 2), 12)]

    table = build_day_table(lines, 10, date(2025, 11, 1), date(2025, 11, 3))

    assert [entry.available for entry in table] == [-2, -2, 10]


def test_first_shortfall_walks_days_in_order():
    lines = [
        _line(date(2025, 11, 3), date(2025, 11, 3), 8),
        _line(date(2025, 11, 5), date(2025, 11, 5), 9),
    ]
    table = build_day_table(lines, 10, date(2025, 11, 1), date(2025, 11, 6))

    assert first_shortfall(table, 1) is None
    assert first_shortfall(table, 2).day == date(2025, 11, 5)
    shortfall = first_shortfall(table, 3)
    assert shortfall.day == date(2025, 11, 3)
    assert shortfall.reserved == 8


def test_peak_day_prefers_first_of_equal_peaks():
    lines = [
        _line(date(2025, 11, 2), date(2025, 11, 2), 4),
        _line(date(2025, 11, 4), date(2025, 11, 4), 4),
    ]
    table = build_day_table(lines, 10, date(2025, 11, 1), date(2025, 11, 5))

    assert peak_day(table).day == date(2025, 11, 2)
    assert peak_day(build_day_table([], 10, date(2025, 11, 1), date(2025, 11, 5))) is None
