"""Availability and admission Pydantic schemas."""

import datetime as dt
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from .booking import BookingItemRequest
from .common import CalendarDate


class RejectionReason(str, Enum):
    """Why an admission was refused."""
    INSUFFICIENT_AVAILABILITY = "INSUFFICIENT_AVAILABILITY"
    CONTENTION = "CONTENTION"


class DayAvailability(BaseModel):
    """Ledger entry for one item on one calendar day."""

    date: dt.date = Field(..., description="Calendar day")
    reserved: int = Field(..., ge=0, description="Units held by reserving bookings")
    available: int = Field(..., description="total - reserved; negative when already oversubscribed")
    total: int = Field(..., ge=0, description="Units owned")


class AvailabilityReport(BaseModel):
    """Per-day availability of one item over an inclusive range."""

    item_id: str = Field(..., description="Item ID")
    item_name: str = Field(..., description="Item display name")
    unit: str = Field(..., description="Unit label")
    start_date: dt.date = Field(..., description="First day (inclusive)")
    end_date: dt.date = Field(..., description="Last day (inclusive)")
    days: list[DayAvailability] = Field(..., description="One entry per day, ascending")


class AdmissionAccepted(BaseModel):
    """Every requested item fits on every requested day."""

    status: Literal["ACCEPTED"] = "ACCEPTED"

    @property
    def accepted(self) -> bool:
        return True


class AdmissionRejected(BaseModel):
    """The first shortfall found walking items in order and days ascending."""

    status: Literal["REJECTED"] = "REJECTED"
    reason: RejectionReason = Field(RejectionReason.INSUFFICIENT_AVAILABILITY, description="Rejection cause")
    item_id: str = Field(..., description="Failing item ID")
    item_name: str = Field(..., description="Failing item name")
    date: dt.date = Field(..., description="Earliest failing day")
    requested: int = Field(..., ge=1, description="Units requested")
    available: int = Field(..., description="Units free on that day")
    reserved: int = Field(..., ge=0, description="Units already held on that day")
    total: int = Field(..., ge=0, description="Units owned")

    @property
    def accepted(self) -> bool:
        return False


class _RangeRequest(BaseModel):
    start_date: CalendarDate = Field(..., description="First day (inclusive)")
    end_date: CalendarDate = Field(..., description="Last day (inclusive)")

    @model_validator(mode="after")
    def check_date_order(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class CheckAvailabilityRequest(_RangeRequest):
    """Request schema for a per-day availability table."""

    item_id: str = Field(..., description="Item to inspect")
    exclude_booking_id: str | None = Field(None, description="Booking to leave out (edit-in-place)")


class AdmitBookingRequest(_RangeRequest):
    """Request schema for a dry-run admission decision."""

    items: list[BookingItemRequest] = Field(..., min_length=1, description="Requested lines")
    exclude_booking_id: str | None = Field(None, description="Booking being edited")


class DaySummaryRequest(BaseModel):
    """Request schema for the all-items view of one day."""

    date: CalendarDate = Field(..., description="Calendar day")


class ItemDayAvailability(BaseModel):
    """One item's figures on one day."""

    item_id: str
    name: str
    unit: str
    total: int
    reserved: int
    remaining: int


class DaySummaryResponse(BaseModel):
    """All items on one day, ordered by name."""

    date: dt.date
    items: list[ItemDayAvailability]


class RangeSummaryRequest(_RangeRequest):
    """Request schema for the per-item peak summary of a range."""


class ItemRangeSummary(BaseModel):
    """One item's busiest day in a range."""

    item_id: str
    name: str
    unit: str
    total: int
    peak_reserved: int = Field(..., ge=0, description="Highest daily reservation in range")
    min_available: int = Field(..., description="total - peak_reserved")
    peak_date: dt.date | None = Field(None, description="First day the peak occurs; null when nothing is reserved")


class RangeSummaryResponse(BaseModel):
    """Per-item peak reservations across a range."""

    start_date: dt.date
    end_date: dt.date
    items: list[ItemRangeSummary]
