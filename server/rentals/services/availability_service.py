"""Availability engine: overlap query, per-day ledger and admission decision."""

import logging
from datetime import date, datetime
from typing import Iterable, Optional, Union
from uuid import UUID

from opentelemetry import trace

from ..core.config import settings
from ..core.dates import days_in_range, to_utc_date
from ..core.exceptions import ValidationError
from ..core.observability import metrics_collector
from ..models.item import Item
from ..repositories.base import BookingLine, BookingStore
from ..schemas.availability import (
    AdmissionAccepted,
    AdmissionRejected,
    AvailabilityReport,
    DayAvailability,
    DaySummaryResponse,
    ItemDayAvailability,
    ItemRangeSummary,
    RangeSummaryResponse,
    RejectionReason,
)
from .ledger import build_day_table, first_shortfall, peak_day, reserved_on_day

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

DateLike = Union[date, datetime, str]
RequestedLine = tuple[Union[str, UUID], int]


def parse_id(value: Union[str, UUID], field: str) -> UUID:
    """Parse a UUID from request input, raising ValidationError on garbage."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise ValidationError(
            detail=f"{field} is not a valid identifier",
            errors={field: value},
        )


def merge_lines(items: Iterable[RequestedLine]) -> list[tuple[UUID, int]]:
    """
    Validate requested lines and merge repeats of the same item.

    Quantities of repeated items are summed at the position of the first
    occurrence, so submission order is preserved.
    """
    merged: dict[UUID, int] = {}
    for raw_id, quantity in items:
        item_id = parse_id(raw_id, "item_id")
        if quantity is None or quantity <= 0:
            raise ValidationError(
                detail="quantity must be a positive integer",
                errors={"item_id": str(item_id), "quantity": quantity},
            )
        merged[item_id] = merged.get(item_id, 0) + quantity

    if not merged:
        raise ValidationError(detail="At least one item line is required")
    return list(merged.items())


class AvailabilityService:
    """Service answering availability questions against a booking store."""

    def __init__(self, store: BookingStore, max_range_days: Optional[int] = None):
        self.store = store
        self.max_range_days = max_range_days or settings.availability_max_range_days

    def validate_range(self, start_date: DateLike, end_date: DateLike) -> tuple[date, date]:
        """
        Normalize both ends to UTC calendar dates and check their order and span.

        Raises:
            ValidationError: If a date is unparseable, end precedes start, or the
                range is longer than the configured maximum
        """
        try:
            start = to_utc_date(start_date)
            end = to_utc_date(end_date)
        except ValueError as e:
            raise ValidationError(detail=str(e))

        if end < start:
            raise ValidationError(
                detail="end_date cannot be before start_date",
                errors={"start_date": start.isoformat(), "end_date": end.isoformat()},
            )

        span = days_in_range(start, end)
        if span > self.max_range_days:
            raise ValidationError(
                detail=f"Date range spans {span} days; the maximum is {self.max_range_days}",
                errors={"start_date": start.isoformat(), "end_date": end.isoformat()},
            )
        return start, end

    async def require_item(self, item_id: UUID) -> Item:
        """Load an item, raising ValidationError when it does not exist."""
        item = await self.store.get_item(item_id)
        if item is None:
            raise ValidationError(
                detail=f"Unknown item '{item_id}'",
                errors={"item_id": str(item_id)},
            )
        return item

    async def find_overlapping(
        self,
        item_id: Union[str, UUID],
        start_date: DateLike,
        end_date: DateLike,
        exclude_booking_id: Optional[Union[str, UUID]] = None,
    ) -> list[BookingLine]:
        """
        Reserving booking lines for an item whose dates intersect the range.

        A booking counts when ``start_date <= range end`` and
        ``end_date >= range start``; both ends are inclusive.
        """
        start, end = self.validate_range(start_date, end_date)
        exclude = parse_id(exclude_booking_id, "exclude_booking_id") if exclude_booking_id else None
        return await self.store.find_overlapping(parse_id(item_id, "item_id"), start, end, exclude)

    async def check_availability(
        self,
        item_id: Union[str, UUID],
        start_date: DateLike,
        end_date: DateLike,
        exclude_booking_id: Optional[Union[str, UUID]] = None,
    ) -> AvailabilityReport:
        """
        Build the per-day availability table of one item.

        Args:
            item_id: Item to inspect
            start_date: First day (inclusive)
            end_date: Last day (inclusive)
            exclude_booking_id: Booking to leave out, used when editing it

        Returns:
            One entry per day with reserved, available and total units

        Raises:
            ValidationError: On a bad range, malformed id or unknown item
        """
        start, end = self.validate_range(start_date, end_date)
        item_uuid = parse_id(item_id, "item_id")
        exclude = parse_id(exclude_booking_id, "exclude_booking_id") if exclude_booking_id else None

        with tracer.start_as_current_span("availability.check") as span:
            span.set_attribute("item.id", str(item_uuid))
            span.set_attribute("range.days", days_in_range(start, end))

            item = await self.require_item(item_uuid)
            lines = await self.store.find_overlapping(item_uuid, start, end, exclude)
            table = build_day_table(lines, item.total_quantity, start, end)

        metrics_collector.record_availability_check(len(table))
        logger.debug(
            "Availability checked",
            extra={
                "item_id": str(item_uuid),
                "start_date": start.isoformat(),
                "end_date": end.isoformat(),
                "overlapping_lines": len(lines),
            }
        )

        return AvailabilityReport(
            item_id=str(item.id),
            item_name=item.name,
            unit=item.unit,
            start_date=start,
            end_date=end,
            days=[
                DayAvailability(date=entry.day, reserved=entry.reserved, available=entry.available, total=entry.total)
                for entry in table
            ],
        )

    async def admit_booking(
        self,
        items: Iterable[RequestedLine],
        start_date: DateLike,
        end_date: DateLike,
        exclude_booking_id: Optional[Union[str, UUID]] = None,
    ) -> Union[AdmissionAccepted, AdmissionRejected]:
        """
        Decide whether the requested lines fit on every day of the range.

        Items are checked in submission order and days in ascending order;
        the first shortfall found is returned. A rejection is a normal
        return value.

        Raises:
            ValidationError: On a bad range, empty or non-positive lines,
                malformed ids or unknown items
        """
        start, end = self.validate_range(start_date, end_date)
        lines = merge_lines(items)
        exclude = parse_id(exclude_booking_id, "exclude_booking_id") if exclude_booking_id else None
        return await self.admit_lines(lines, start, end, exclude)

    async def admit_lines(
        self,
        lines: list[tuple[UUID, int]],
        start: date,
        end: date,
        exclude_booking_id: Optional[UUID] = None,
    ) -> Union[AdmissionAccepted, AdmissionRejected]:
        """Admission over already validated lines and dates."""
        with tracer.start_as_current_span("availability.admit") as span:
            span.set_attribute("booking.lines", len(lines))
            span.set_attribute("range.days", days_in_range(start, end))

            # Unknown items are a validation failure, not a rejection
            items = [await self.require_item(item_id) for item_id, _ in lines]

            for item, (item_id, requested) in zip(items, lines):
                overlapping = await self.store.find_overlapping(item_id, start, end, exclude_booking_id)
                table = build_day_table(overlapping, item.total_quantity, start, end)
                shortfall = first_shortfall(table, requested)
                if shortfall is None:
                    continue

                span.set_attribute("admission.outcome", "rejected")
                metrics_collector.record_admission("rejected")
                logger.info(
                    "Admission rejected - insufficient availability",
                    extra={
                        "item_id": str(item_id),
                        "date": shortfall.day.isoformat(),
                        "requested": requested,
                        "reserved": shortfall.reserved,
                        "total": shortfall.total,
                    }
                )
                return AdmissionRejected(
                    reason=RejectionReason.INSUFFICIENT_AVAILABILITY,
                    item_id=str(item.id),
                    item_name=item.name,
                    date=shortfall.day,
                    requested=requested,
                    available=shortfall.available,
                    reserved=shortfall.reserved,
                    total=shortfall.total,
                )

            span.set_attribute("admission.outcome", "accepted")

        metrics_collector.record_admission("accepted")
        return AdmissionAccepted()

    async def day_summary(self, day: DateLike) -> DaySummaryResponse:
        """Total, reserved and remaining units of every item on one day."""
        target, _ = self.validate_range(day, day)
        entries = []
        for item in await self.store.list_items():
            lines = await self.store.find_overlapping(item.id, target, target)
            reserved = reserved_on_day(lines, target)
            entries.append(
                ItemDayAvailability(
                    item_id=str(item.id),
                    name=item.name,
                    unit=item.unit,
                    total=item.total_quantity,
                    reserved=reserved,
                    remaining=item.total_quantity - reserved,
                )
            )
        return DaySummaryResponse(date=target, items=entries)

    async def range_summary(self, start_date: DateLike, end_date: DateLike) -> RangeSummaryResponse:
        """
        Peak daily reservation of every item across a range.

        ``min_available`` is measured against the busiest day rather than
        the sum over the whole range.
        """
        start, end = self.validate_range(start_date, end_date)
        entries = []
        for item in await self.store.list_items():
            lines = await self.store.find_overlapping(item.id, start, end)
            peak = peak_day(build_day_table(lines, item.total_quantity, start, end))
            peak_reserved = peak.reserved if peak else 0
            entries.append(
                ItemRangeSummary(
                    item_id=str(item.id),
                    name=item.name,
                    unit=item.unit,
                    total=item.total_quantity,
                    peak_reserved=peak_reserved,
                    min_available=item.total_quantity - peak_reserved,
                    peak_date=peak.day if peak else None,
                )
            )
        return RangeSummaryResponse(start_date=start, end_date=end, items=entries)
