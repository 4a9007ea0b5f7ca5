"""Service layer package."""

from .availability_service import AvailabilityService
from .booking_service import BookingService
from .item_service import ItemService

__all__ = [
    "AvailabilityService",
    "BookingService",
    "ItemService",
]
