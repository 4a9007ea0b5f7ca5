"""Availability router for ledger queries and dry-run admission."""

import logging
from typing import Union

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..core.dependencies import AvailabilityDependency
from ..schemas.availability import (
    AdmissionAccepted,
    AdmissionRejected,
    AdmitBookingRequest,
    AvailabilityReport,
    CheckAvailabilityRequest,
    DaySummaryRequest,
    DaySummaryResponse,
    RangeSummaryRequest,
    RangeSummaryResponse,
)
from ..services.availability_service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/availability", tags=["availability"])


@router.post("/check", response_model=AvailabilityReport)
async def check_availability(
    request: CheckAvailabilityRequest,
    service: AvailabilityService = AvailabilityDependency
) -> JSONResponse:
    """Per-day reserved and available units of one item."""
    report = await service.check_availability(
        request.item_id,
        request.start_date,
        request.end_date,
        exclude_booking_id=request.exclude_booking_id
    )
    return JSONResponse(status_code=200, content=report.model_dump(mode="json"))


@router.post("/admit", response_model=Union[AdmissionAccepted, AdmissionRejected])
async def admit_booking(
    request: AdmitBookingRequest,
    service: AvailabilityService = AvailabilityDependency
) -> JSONResponse:
    """
    Dry-run admission decision.

    Always 200: a rejection is an answer, not an error. Nothing is reserved.
    """
    decision = await service.admit_booking(
        [(line.item_id, line.quantity) for line in request.items],
        request.start_date,
        request.end_date,
        exclude_booking_id=request.exclude_booking_id
    )

    logger.debug(
        "Dry-run admission evaluated",
        extra={"status": decision.status, "lines": len(request.items)}
    )

    return JSONResponse(status_code=200, content=decision.model_dump(mode="json"))


@router.post("/day", response_model=DaySummaryResponse)
async def day_summary(
    request: DaySummaryRequest,
    service: AvailabilityService = AvailabilityDependency
) -> JSONResponse:
    """Every item's total, reserved and remaining units on one day."""
    summary = await service.day_summary(request.date)
    return JSONResponse(status_code=200, content=summary.model_dump(mode="json"))


@router.post("/summary", response_model=RangeSummaryResponse)
async def range_summary(
    request: RangeSummaryRequest,
    service: AvailabilityService = AvailabilityDependency
) -> JSONResponse:
    """Every item's busiest day across a range."""
    summary = await service.range_summary(request.start_date, request.end_date)
    return JSONResponse(status_code=200, content=summary.model_dump(mode="json"))
