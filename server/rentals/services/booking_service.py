"""Booking service for business logic operations."""

import logging
from datetime import date
from typing import Awaitable, Callable, Optional, Union
from uuid import UUID

from ..core.config import settings
from ..core.exceptions import ConcurrencyConflictError, ConflictError, InvalidStatusTransitionError, NotFoundError
from ..core.observability import metrics_collector
from ..models.booking import ALLOWED_TRANSITIONS, Booking, BookingStatus
from ..repositories.base import BookingStore, NewBooking
from ..schemas.availability import AdmissionRejected, RejectionReason
from ..schemas.booking import CreateBookingRequest, UpdateBookingRequest
from .availability_service import AvailabilityService, merge_lines, parse_id
from .ledger import reserved_on_day

logger = logging.getLogger(__name__)


class BookingService:
    """Service for booking lifecycle operations."""

    def __init__(
        self,
        store: BookingStore,
        availability: Optional[AvailabilityService] = None,
        conflict_retries: Optional[int] = None,
    ):
        self.store = store
        self.availability = availability or AvailabilityService(store)
        self.conflict_retries = settings.admission_conflict_retries if conflict_retries is None else conflict_retries

    async def create_booking(self, request: CreateBookingRequest) -> Union[Booking, AdmissionRejected]:
        """
        Create a booking if every requested line fits on every day.

        Args:
            request: Booking creation request

        Returns:
            The stored booking, or the rejection describing the first shortfall

        Raises:
            ValidationError: If the range, lines or item ids are invalid
            StoreUnavailableError: If the store cannot be reached
        """
        start, end = self.availability.validate_range(request.start_date, request.end_date)
        lines = merge_lines((line.item_id, line.quantity) for line in request.items)
        new_booking = NewBooking(
            customer_ref=request.customer_ref,
            start_date=start,
            end_date=end,
            status=BookingStatus(request.status),
            lines=lines,
            reference=request.reference,
            notes=request.notes,
        )

        outcome = await self._admit_and_write(
            lines, start, end, lambda: self.store.insert_booking(new_booking)
        )
        if isinstance(outcome, AdmissionRejected):
            return outcome

        booking = await self.get_booking_by_id_or_raise(outcome)
        logger.info(
            "Booking created successfully",
            extra={
                "booking_id": str(booking.id),
                "customer_ref": booking.customer_ref,
                "start_date": start.isoformat(),
                "end_date": end.isoformat(),
                "lines": len(lines),
                "status": booking.status,
            }
        )
        return booking

    async def update_booking(self, request: UpdateBookingRequest) -> Union[Booking, AdmissionRejected]:
        """
        Replace a booking's customer, dates, lines and notes.

        The booking is left out of its own admission check. Bookings that no
        longer hold capacity are rewritten without an admission check.

        Raises:
            NotFoundError: If the booking does not exist
            ValidationError: If the range, lines or item ids are invalid
        """
        booking_id = parse_id(request.booking_id, "booking_id")
        existing = await self.get_booking_by_id_or_raise(booking_id)
        status = BookingStatus(existing.status)

        start, end = self.availability.validate_range(request.start_date, request.end_date)
        lines = merge_lines((line.item_id, line.quantity) for line in request.items)
        replacement = NewBooking(
            customer_ref=request.customer_ref,
            start_date=start,
            end_date=end,
            status=status,
            lines=lines,
            reference=request.reference,
            notes=request.notes,
        )

        async def write() -> UUID:
            await self.store.replace_booking(booking_id, replacement)
            return booking_id

        if status.reserves_capacity:
            outcome = await self._admit_and_write(lines, start, end, write, exclude_booking_id=booking_id)
            if isinstance(outcome, AdmissionRejected):
                return outcome
        else:
            for item_id, _ in lines:
                await self.availability.require_item(item_id)
            async with self.store.reservation_scope([item_id for item_id, _ in lines]):
                await write()

        booking = await self.get_booking_by_id_or_raise(booking_id)
        logger.info(
            "Booking updated successfully",
            extra={
                "booking_id": str(booking_id),
                "start_date": start.isoformat(),
                "end_date": end.isoformat(),
                "lines": len(lines),
                "admission_checked": status.reserves_capacity,
            }
        )
        return booking

    async def transition_status(self, booking_id: Union[str, UUID], status: Union[str, BookingStatus]) -> Booking:
        """
        Move a booking along its lifecycle.

        Re-applying the current status returns the booking unchanged.

        Raises:
            NotFoundError: If the booking does not exist
            InvalidStatusTransitionError: If the lifecycle forbids the move
            ConflictError: If the status changed underneath this request
        """
        booking_uuid = parse_id(booking_id, "booking_id")
        target = BookingStatus(status)
        booking = await self.get_booking_by_id_or_raise(booking_uuid)
        current = BookingStatus(booking.status)

        if current == target:
            return booking

        if target not in ALLOWED_TRANSITIONS[current]:
            logger.warning(
                "Booking status transition refused",
                extra={
                    "booking_id": str(booking_uuid),
                    "current_status": current.value,
                    "requested_status": target.value,
                }
            )
            raise InvalidStatusTransitionError(str(booking_uuid), current.value, target.value)

        if not await self.store.update_status(booking_uuid, current, target):
            raise ConflictError(
                detail=f"Booking {booking_uuid} changed status while it was being updated",
                conflicting_resource={"booking_id": str(booking_uuid)},
            )

        metrics_collector.record_status_transition(current.value, target.value)
        logger.info(
            "Booking status changed",
            extra={
                "booking_id": str(booking_uuid),
                "from_status": current.value,
                "to_status": target.value,
            }
        )
        return await self.get_booking_by_id_or_raise(booking_uuid)

    async def get_booking(self, booking_id: Union[str, UUID]) -> Optional[Booking]:
        return await self.store.get_booking(parse_id(booking_id, "booking_id"))

    async def get_booking_by_id_or_raise(self, booking_id: Union[str, UUID]) -> Booking:
        booking = await self.get_booking(booking_id)
        if booking is None:
            raise NotFoundError(resource_type="booking", resource_id=str(booking_id))
        return booking

    async def _admit_and_write(
        self,
        lines: list[tuple[UUID, int]],
        start: date,
        end: date,
        write: Callable[[], Awaitable[UUID]],
        exclude_booking_id: Optional[UUID] = None,
    ) -> Union[UUID, AdmissionRejected]:
        """
        Run admission and the write under one reservation scope.

        A lost race re-runs the whole check-and-write; once the retries are
        spent the caller gets a contention rejection.
        """
        item_ids = [item_id for item_id, _ in lines]
        attempt = 0

        while True:
            attempt += 1
            try:
                async with self.store.reservation_scope(item_ids):
                    decision = await self.availability.admit_lines(lines, start, end, exclude_booking_id)
                    if isinstance(decision, AdmissionRejected):
                        return decision
                    written_id = await write()
                return written_id

            except ConcurrencyConflictError as e:
                if attempt <= self.conflict_retries:
                    metrics_collector.record_conflict_retry()
                    logger.warning(
                        "Reservation conflict - retrying admission",
                        extra={"item_ids": e.item_ids, "attempt": attempt, "cause": e.cause}
                    )
                    continue

                logger.warning(
                    "Reservation conflict persisted - rejecting booking",
                    extra={"item_ids": e.item_ids, "attempts": attempt, "cause": e.cause}
                )
                metrics_collector.record_admission("contention")
                return await self._contention_rejection(lines, start, exclude_booking_id)

    async def _contention_rejection(
        self,
        lines: list[tuple[UUID, int]],
        start: date,
        exclude_booking_id: Optional[UUID],
    ) -> AdmissionRejected:
        """Rejection carrying the first requested item's figures on the first day."""
        items = [await self.availability.require_item(line_item_id) for line_item_id, _ in lines]
        item_id, requested = lines[0]
        item = items[0]
        overlapping = await self.store.find_overlapping(item_id, start, start, exclude_booking_id)
        reserved = reserved_on_day(overlapping, start)
        return AdmissionRejected(
            reason=RejectionReason.CONTENTION,
            item_id=str(item_id),
            item_name=item.name,
            date=start,
            requested=requested,
            available=item.total_quantity - reserved,
            reserved=reserved,
            total=item.total_quantity,
        )
