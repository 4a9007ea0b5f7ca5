"""In-memory booking store used by tests and local experiments."""

import asyncio
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import AsyncIterator, Optional, Sequence
from uuid import UUID, uuid4

from ..core.config import settings
from ..core.locking import ItemLockManager
from ..models.booking import Booking, BookingItem, BookingStatus
from ..models.item import Item
from .base import BookingLine, NewBooking


class InMemoryBookingStore:
    """
    Dictionary-backed store with the same contract as the SQL store.

    Writes made inside ``reservation_scope`` are staged and only become
    visible when the scope exits cleanly. Each task stages into its own
    buffer, so scopes over disjoint items can be open at the same time.
    ``latency`` is awaited on every read so that interleavings between
    concurrent requests are observable.
    """

    def __init__(self, latency: float = 0.0, lock_timeout: Optional[float] = None):
        self.latency = latency
        self.lock_timeout = lock_timeout if lock_timeout is not None else settings.lock_timeout_seconds
        self.items: dict[UUID, Item] = {}
        self.bookings: dict[UUID, Booking] = {}
        self._locks = ItemLockManager()
        self._staged: dict[asyncio.Task, dict[UUID, Booking]] = {}

    def add_item(
        self,
        name: str,
        total_quantity: int,
        unit: str = "pcs",
        price: Optional[Decimal] = None,
        item_id: Optional[UUID] = None,
    ) -> Item:
        item = Item(
            id=item_id or uuid4(),
            name=name,
            unit=unit,
            total_quantity=total_quantity,
            price=price,
        )
        self.items[item.id] = item
        return item

    def seed_booking(
        self,
        start_date: date,
        end_date: date,
        lines: list[tuple[UUID, int]],
        status: BookingStatus = BookingStatus.CONFIRMED,
        customer_ref: str = "seed",
    ) -> Booking:
        """Store a booking directly, bypassing admission."""
        booking_id = uuid4()
        self.bookings[booking_id] = self._build(
            booking_id,
            NewBooking(
                customer_ref=customer_ref,
                start_date=start_date,
                end_date=end_date,
                status=status,
                lines=lines,
            ),
        )
        return self.bookings[booking_id]

    def _build(self, booking_id: UUID, booking: NewBooking) -> Booking:
        now = datetime.now(timezone.utc)
        return Booking(
            id=booking_id,
            customer_ref=booking.customer_ref,
            start_date=booking.start_date,
            end_date=booking.end_date,
            status=BookingStatus(booking.status).value,
            reference=booking.reference,
            notes=booking.notes,
            created_at=now,
            updated_at=now,
            items=[
                BookingItem(id=uuid4(), booking_id=booking_id, item_id=item_id, quantity=quantity, position=position)
                for position, (item_id, quantity) in enumerate(booking.lines)
            ],
        )

    async def _pause(self) -> None:
        await asyncio.sleep(self.latency)

    async def get_item(self, item_id: UUID) -> Optional[Item]:
        await self._pause()
        return self.items.get(item_id)

    async def list_items(self) -> list[Item]:
        await self._pause()
        return sorted(self.items.values(), key=lambda item: (item.name, str(item.id)))

    async def find_overlapping(
        self,
        item_id: UUID,
        start: date,
        end: date,
        exclude_booking_id: Optional[UUID] = None,
    ) -> list[BookingLine]:
        await self._pause()
        lines = []
        for booking in self.bookings.values():
            status = BookingStatus(booking.status)
            if booking.id == exclude_booking_id or not status.reserves_capacity:
                continue
            if booking.start_date > end or booking.end_date < start:
                continue
            for line in booking.items:
                if line.item_id == item_id:
                    lines.append(
                        BookingLine(
                            booking_id=booking.id,
                            item_id=line.item_id,
                            quantity=line.quantity,
                            start_date=booking.start_date,
                            end_date=booking.end_date,
                            status=status,
                        )
                    )
        lines.sort(key=lambda line: (line.start_date, str(line.booking_id)))
        return lines

    @asynccontextmanager
    async def reservation_scope(self, item_ids: Sequence[UUID]) -> AsyncIterator[None]:
        async with self._locks.hold((str(item_id) for item_id in item_ids), self.lock_timeout):
            task = asyncio.current_task()
            staged: dict[UUID, Booking] = {}
            self._staged[task] = staged
            try:
                yield
            finally:
                del self._staged[task]
            self.bookings.update(staged)

    def _stage(self, booking: Booking) -> None:
        staged = self._staged.get(asyncio.current_task())
        if staged is None:
            raise RuntimeError("Booking writes must run inside reservation_scope")
        staged[booking.id] = booking

    async def insert_booking(self, booking: NewBooking) -> UUID:
        booking_id = uuid4()
        self._stage(self._build(booking_id, booking))
        return booking_id

    async def replace_booking(self, booking_id: UUID, booking: NewBooking) -> None:
        existing = self.bookings[booking_id]
        replacement = self._build(booking_id, booking)
        replacement.status = existing.status
        replacement.created_at = existing.created_at
        self._stage(replacement)

    async def get_booking(self, booking_id: UUID) -> Optional[Booking]:
        await self._pause()
        return self.bookings.get(booking_id)

    async def update_status(
        self,
        booking_id: UUID,
        expected: BookingStatus,
        status: BookingStatus,
    ) -> bool:
        booking = self.bookings.get(booking_id)
        if booking is None or BookingStatus(booking.status) != expected:
            return False
        booking.status = status.value
        booking.updated_at = datetime.now(timezone.utc)
        return True
