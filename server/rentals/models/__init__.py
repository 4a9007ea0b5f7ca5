"""Models module exporting all database models."""

from .booking import ALLOWED_TRANSITIONS, RESERVING_STATUSES, Booking, BookingItem, BookingStatus
from .item import Item

__all__ = [
    # Inventory
    "Item",

    # Booking entities
    "Booking",
    "BookingItem",
    "BookingStatus",
    "RESERVING_STATUSES",
    "ALLOWED_TRANSITIONS",
]
