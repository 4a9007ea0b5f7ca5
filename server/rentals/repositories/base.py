"""Booking store port consumed by the availability engine and booking services."""

from dataclasses import dataclass, field
from datetime import date
from typing import AsyncContextManager, Optional, Protocol, Sequence
from uuid import UUID

from ..models.booking import Booking, BookingStatus
from ..models.item import Item


@dataclass(frozen=True)
class BookingLine:
    """The fields of one reservation line the ledger needs, and nothing else."""

    booking_id: UUID
    item_id: UUID
    quantity: int
    start_date: date
    end_date: date
    status: BookingStatus

    def covers(self, day: date) -> bool:
        """True when the parent booking is active on ``day`` (both ends inclusive)."""
        return self.start_date <= day <= self.end_date


@dataclass
class NewBooking:
    """Booking fields to persist; ``lines`` are ``(item_id, quantity)`` in order."""

    customer_ref: str
    start_date: date
    end_date: date
    status: BookingStatus = BookingStatus.CONFIRMED
    lines: list[tuple[UUID, int]] = field(default_factory=list)
    reference: Optional[str] = None
    notes: Optional[str] = None


class BookingStore(Protocol):
    """
    Storage port for items and bookings.

    ``insert_booking`` and ``replace_booking`` must run inside
    ``reservation_scope`` for the items they touch; the scope serializes
    concurrent reservations of those items and makes the write durable when
    it exits cleanly.
    """

    async def get_item(self, item_id: UUID) -> Optional[Item]:
        ...

    async def list_items(self) -> list[Item]:
        ...

    async def find_overlapping(
        self,
        item_id: UUID,
        start: date,
        end: date,
        exclude_booking_id: Optional[UUID] = None,
    ) -> list[BookingLine]:
        """Lines for ``item_id`` of reserving bookings with start <= end and end >= start."""
        ...

    def reservation_scope(self, item_ids: Sequence[UUID]) -> AsyncContextManager[None]:
        ...

    async def insert_booking(self, booking: NewBooking) -> UUID:
        ...

    async def replace_booking(self, booking_id: UUID, booking: NewBooking) -> None:
        ...

    async def get_booking(self, booking_id: UUID) -> Optional[Booking]:
        ...

    async def update_status(
        self,
        booking_id: UUID,
        expected: BookingStatus,
        status: BookingStatus,
    ) -> bool:
        """Compare-and-set the status; False when the stored status was not ``expected``."""
        ...
