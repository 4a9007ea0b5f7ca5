"""Day-granular reservation ledger.

Pure functions over booking lines; nothing here touches the store.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from ..core.dates import iter_days
from ..repositories.base import BookingLine


@dataclass(frozen=True)
class LedgerDay:
    day: date
    reserved: int
    total: int

    @property
    def available(self) -> int:
        return self.total - self.reserved


def reserved_on_day(lines: Iterable[BookingLine], day: date) -> int:
    """Sum of quantities of the lines whose booking is active on ``day``."""
    return sum(line.quantity for line in lines if line.covers(day))


def build_day_table(lines: list[BookingLine], total: int, start: date, end: date) -> list[LedgerDay]:
    """
    One ledger entry per day from ``start`` to ``end`` inclusive.

    ``available`` goes negative when stored data already exceeds ``total``;
    that is reported, not raised.
    """
    return [LedgerDay(day=day, reserved=reserved_on_day(lines, day), total=total) for day in iter_days(start, end)]


def first_shortfall(table: list[LedgerDay], requested: int) -> Optional[LedgerDay]:
    """The earliest day on which ``requested`` more units would not fit."""
    for entry in table:
        if entry.reserved + requested > entry.total:
            return entry
    return None


def peak_day(table: list[LedgerDay]) -> Optional[LedgerDay]:
    """The first day with the highest reservation; None when nothing is reserved."""
    peak = None
    for entry in table:
        if entry.reserved > 0 and (peak is None or entry.reserved > peak.reserved):
            peak = entry
    return peak
