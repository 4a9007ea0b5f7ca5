"""Booking-related Pydantic schemas."""

from datetime import date, datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from .common import CalendarDate


class BookingStatus(str, Enum):
    """Booking status enumeration."""
    CONFIRMED = "CONFIRMED"
    OUT = "OUT"
    RETURNED = "RETURNED"
    CANCELLED = "CANCELLED"


class BookingItemRequest(BaseModel):
    """One requested line: ``quantity`` units of one item."""

    item_id: str = Field(..., description="Item to reserve")
    quantity: int = Field(..., ge=1, description="Units to reserve")


class _DateRangeRequest(BaseModel):
    start_date: CalendarDate = Field(..., description="First day (inclusive, UTC calendar date)")
    end_date: CalendarDate = Field(..., description="Last day (inclusive, UTC calendar date)")

    @model_validator(mode="after")
    def check_date_order(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class CreateBookingRequest(_DateRangeRequest):
    """Request schema for creating a booking."""

    customer_ref: str = Field(..., min_length=1, max_length=128, description="Customer reference")
    items: list[BookingItemRequest] = Field(..., min_length=1, description="Requested lines")
    status: Literal["CONFIRMED", "OUT"] = Field("CONFIRMED", description="Initial status")
    reference: str | None = Field(None, max_length=128, description="External reference")
    notes: str | None = Field(None, max_length=2000, description="Free-form notes")


class UpdateBookingRequest(_DateRangeRequest):
    """Request schema for editing a booking in place."""

    booking_id: str = Field(..., description="Booking to edit")
    customer_ref: str = Field(..., min_length=1, max_length=128, description="Customer reference")
    items: list[BookingItemRequest] = Field(..., min_length=1, description="Replacement lines")
    reference: str | None = Field(None, max_length=128, description="External reference")
    notes: str | None = Field(None, max_length=2000, description="Free-form notes")


class UpdateBookingStatusRequest(BaseModel):
    """Request schema for a booking status transition."""

    booking_id: str = Field(..., description="Booking to transition")
    status: BookingStatus = Field(..., description="Target status")


class GetBookingRequest(BaseModel):
    """Request schema for getting a booking."""

    booking_id: str = Field(..., description="Booking to retrieve")


class BookingLine(BaseModel):
    """Booking line response schema."""

    item_id: str = Field(..., description="Reserved item")
    quantity: int = Field(..., ge=1, description="Units reserved")


class Booking(BaseModel):
    """Booking response schema."""

    id: str = Field(..., description="Unique booking ID")
    customer_ref: str = Field(..., description="Customer reference")
    start_date: date = Field(..., description="First day (inclusive)")
    end_date: date = Field(..., description="Last day (inclusive)")
    status: BookingStatus = Field(..., description="Booking status")
    reference: str | None = Field(None, description="External reference")
    notes: str | None = Field(None, description="Free-form notes")
    items: list[BookingLine] = Field(..., description="Reservation lines in order")
    created_at: datetime | None = Field(None, description="Creation time (ISO 8601)")

    model_config = {"from_attributes": True}
