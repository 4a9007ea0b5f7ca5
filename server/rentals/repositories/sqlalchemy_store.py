"""SQLAlchemy implementation of the booking store."""

import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import AsyncIterator, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select, text, update
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.config import settings
from ..core.exceptions import ConcurrencyConflictError, StoreUnavailableError
from ..core.locking import item_locks
from ..models.booking import RESERVING_STATUSES, Booking, BookingItem, BookingStatus
from ..models.item import Item
from .base import BookingLine, NewBooking

logger = logging.getLogger(__name__)

# lock_not_available, serialization_failure, deadlock_detected
LOCK_CONFLICT_SQLSTATES = frozenset({"55P03", "40001", "40P01"})


def _is_lock_conflict(exc: DBAPIError) -> bool:
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in LOCK_CONFLICT_SQLSTATES:
        return True
    # SQLite reports writer contention only through the message
    return "database is locked" in str(orig).lower()


class SqlAlchemyBookingStore:
    """Booking store backed by an async SQLAlchemy session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @property
    def _is_postgres(self) -> bool:
        bind = self.db.bind
        return bind is not None and bind.dialect.name == "postgresql"

    @asynccontextmanager
    async def _translate_errors(self, item_ids: Optional[list[str]] = None) -> AsyncIterator[None]:
        """Map driver errors to the service's error taxonomy."""
        try:
            yield
        except DBAPIError as e:
            if _is_lock_conflict(e):
                logger.warning(
                    "Reservation lost a database lock race",
                    extra={"item_ids": item_ids or [], "error": str(e.orig)}
                )
                raise ConcurrencyConflictError(item_ids=item_ids, cause=str(e.orig)) from e
            if isinstance(e, (OperationalError, InterfaceError)) or e.connection_invalidated:
                logger.error("Booking store unavailable", extra={"error": str(e.orig)})
                raise StoreUnavailableError() from e
            raise
        except (ConnectionError, OSError) as e:
            logger.error("Booking store unreachable", extra={"error": str(e)})
            raise StoreUnavailableError() from e

    async def get_item(self, item_id: UUID) -> Optional[Item]:
        async with self._translate_errors():
            result = await self.db.execute(select(Item).where(Item.id == item_id))
            return result.scalar_one_or_none()

    async def list_items(self) -> list[Item]:
        async with self._translate_errors():
            result = await self.db.execute(select(Item).order_by(Item.name, Item.id))
            return list(result.scalars())

    async def find_overlapping(
        self,
        item_id: UUID,
        start: date,
        end: date,
        exclude_booking_id: Optional[UUID] = None,
    ) -> list[BookingLine]:
        stmt = (
            select(
                Booking.id,
                BookingItem.item_id,
                BookingItem.quantity,
                Booking.start_date,
                Booking.end_date,
                Booking.status,
            )
            .join(BookingItem, BookingItem.booking_id == Booking.id)
            .where(
                BookingItem.item_id == item_id,
                Booking.status.in_([status.value for status in RESERVING_STATUSES]),
                Booking.start_date <= end,
                Booking.end_date >= start,
            )
            .order_by(Booking.start_date, Booking.id, BookingItem.position)
        )
        if exclude_booking_id is not None:
            stmt = stmt.where(Booking.id != exclude_booking_id)

        async with self._translate_errors([str(item_id)]):
            result = await self.db.execute(stmt)
            rows = result.all()

        return [
            BookingLine(
                booking_id=row.id,
                item_id=row.item_id,
                quantity=row.quantity,
                start_date=row.start_date,
                end_date=row.end_date,
                status=BookingStatus(row.status),
            )
            for row in rows
        ]

    @asynccontextmanager
    async def reservation_scope(self, item_ids: Sequence[UUID]) -> AsyncIterator[None]:
        """
        Serialize reservations of ``item_ids`` and commit the enclosed writes.

        In-process locks cover concurrent requests within this worker; on
        PostgreSQL, transaction-scoped advisory locks cover other workers.
        Both are taken in sorted id order.
        """
        keys = sorted({str(item_id) for item_id in item_ids})
        async with item_locks.hold(keys, settings.lock_timeout_seconds):
            try:
                async with self._translate_errors(keys):
                    if self._is_postgres:
                        timeout_ms = int(settings.lock_timeout_seconds * 1000)
                        await self.db.execute(text(f"SET LOCAL lock_timeout = {timeout_ms}"))
                        for key in keys:
                            await self.db.execute(
                                text("SELECT pg_advisory_xact_lock(hashtext(:item_id))"),
                                {"item_id": key}
                            )
                        logger.debug("Acquired advisory locks for items", extra={"item_ids": keys})

                    yield

                    await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise

    async def insert_booking(self, booking: NewBooking) -> UUID:
        model = Booking(
            customer_ref=booking.customer_ref,
            start_date=booking.start_date,
            end_date=booking.end_date,
            status=BookingStatus(booking.status).value,
            reference=booking.reference,
            notes=booking.notes,
            items=[
                BookingItem(item_id=item_id, quantity=quantity, position=position)
                for position, (item_id, quantity) in enumerate(booking.lines)
            ],
        )
        self.db.add(model)
        async with self._translate_errors():
            await self.db.flush()
        return model.id

    async def replace_booking(self, booking_id: UUID, booking: NewBooking) -> None:
        async with self._translate_errors():
            result = await self.db.execute(
                select(Booking).options(selectinload(Booking.items)).where(Booking.id == booking_id)
            )
            model = result.scalar_one()

            model.customer_ref = booking.customer_ref
            model.start_date = booking.start_date
            model.end_date = booking.end_date
            model.reference = booking.reference
            model.notes = booking.notes
            # delete-orphan removes the previous lines on flush
            model.items = [
                BookingItem(item_id=item_id, quantity=quantity, position=position)
                for position, (item_id, quantity) in enumerate(booking.lines)
            ]
            await self.db.flush()

    async def get_booking(self, booking_id: UUID) -> Optional[Booking]:
        stmt = (
            select(Booking)
            .options(selectinload(Booking.items))
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        async with self._translate_errors():
            result = await self.db.execute(stmt)
            return result.scalar_one_or_none()

    async def update_status(
        self,
        booking_id: UUID,
        expected: BookingStatus,
        status: BookingStatus,
    ) -> bool:
        stmt = (
            update(Booking)
            .where(Booking.id == booking_id, Booking.status == expected.value)
            .values(status=status.value, updated_at=func.now())
        )
        try:
            async with self._translate_errors():
                result = await self.db.execute(stmt)
                await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return result.rowcount == 1
