"""Booking router for booking lifecycle operations."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..core.dependencies import BookingDependency
from ..core.exceptions import PROBLEM_BASE_URI
from ..schemas.availability import AdmissionRejected, RejectionReason
from ..schemas.booking import (
    Booking,
    BookingLine,
    CreateBookingRequest,
    GetBookingRequest,
    UpdateBookingRequest,
    UpdateBookingStatusRequest,
)
from ..services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/booking", tags=["booking"])

_REJECTION_TITLES = {
    RejectionReason.INSUFFICIENT_AVAILABILITY: "Insufficient Availability",
    RejectionReason.CONTENTION: "Booking Contention",
}


def _convert_booking_to_schema(booking_model) -> Booking:
    """Convert booking model to schema."""
    return Booking(
        id=str(booking_model.id),
        customer_ref=booking_model.customer_ref,
        start_date=booking_model.start_date,
        end_date=booking_model.end_date,
        status=booking_model.status,
        reference=booking_model.reference,
        notes=booking_model.notes,
        items=[BookingLine(item_id=str(line.item_id), quantity=line.quantity) for line in booking_model.items],
        created_at=booking_model.created_at
    )


def _rejection_response(rejection: AdmissionRejected, instance: str) -> JSONResponse:
    """Render a capacity rejection as a 409 Problem Details document."""
    detail = (
        f"{rejection.item_name} has {rejection.available} of {rejection.total} available "
        f"on {rejection.date.isoformat()}; {rejection.requested} requested"
    )
    content = {
        "type": f"{PROBLEM_BASE_URI}/{rejection.reason.value.lower().replace('_', '-')}",
        "title": _REJECTION_TITLES[rejection.reason],
        "status": 409,
        "detail": detail,
        "instance": instance,
        "code": rejection.reason.value,
        "retryable": rejection.reason == RejectionReason.CONTENTION,
    }
    content.update(rejection.model_dump(mode="json", exclude={"status", "reason"}))
    return JSONResponse(status_code=409, content=content, media_type="application/problem+json")


@router.post("/create", response_model=Booking, status_code=201)
async def create_booking(
    request: CreateBookingRequest,
    service: BookingService = BookingDependency
) -> JSONResponse:
    """
    Create a booking.

    Returns 409 with the first failing item and day when capacity is short.
    """
    result = await service.create_booking(request)
    if isinstance(result, AdmissionRejected):
        return _rejection_response(result, "/v1/booking/create")

    response_data = _convert_booking_to_schema(result)
    return JSONResponse(status_code=201, content=response_data.model_dump(mode="json"))


@router.post("/update", response_model=Booking)
async def update_booking(
    request: UpdateBookingRequest,
    service: BookingService = BookingDependency
) -> JSONResponse:
    """Edit a booking in place; the booking never conflicts with itself."""
    result = await service.update_booking(request)
    if isinstance(result, AdmissionRejected):
        return _rejection_response(result, "/v1/booking/update")

    response_data = _convert_booking_to_schema(result)
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/status", response_model=Booking)
async def update_booking_status(
    request: UpdateBookingStatusRequest,
    service: BookingService = BookingDependency
) -> JSONResponse:
    """Move a booking along CONFIRMED -> OUT -> RETURNED, or cancel it."""
    booking = await service.transition_status(request.booking_id, request.status.value)
    response_data = _convert_booking_to_schema(booking)
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/get", response_model=Booking)
async def get_booking(
    request: GetBookingRequest,
    service: BookingService = BookingDependency
) -> JSONResponse:
    """Get booking details by ID."""
    booking = await service.get_booking_by_id_or_raise(request.booking_id)
    response_data = _convert_booking_to_schema(booking)
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))
