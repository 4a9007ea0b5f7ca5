"""Booking store implementations."""

from .base import BookingLine, BookingStore, NewBooking
from .memory_store import InMemoryBookingStore
from .sqlalchemy_store import SqlAlchemyBookingStore

__all__ = [
    "BookingLine",
    "BookingStore",
    "NewBooking",
    "InMemoryBookingStore",
    "SqlAlchemyBookingStore",
]
