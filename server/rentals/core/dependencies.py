"""FastAPI dependencies wiring sessions, stores and services."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..repositories.sqlalchemy_store import SqlAlchemyBookingStore
from ..services.availability_service import AvailabilityService
from ..services.booking_service import BookingService
from ..services.item_service import ItemService
from .database import get_db


def get_booking_store(db: AsyncSession = Depends(get_db)) -> SqlAlchemyBookingStore:
    """Booking store bound to the request's database session."""
    return SqlAlchemyBookingStore(db)


def get_availability_service(
    store: SqlAlchemyBookingStore = Depends(get_booking_store),
) -> AvailabilityService:
    return AvailabilityService(store)


def get_booking_service(
    store: SqlAlchemyBookingStore = Depends(get_booking_store),
    availability: AvailabilityService = Depends(get_availability_service),
) -> BookingService:
    return BookingService(store, availability)


def get_item_service(db: AsyncSession = Depends(get_db)) -> ItemService:
    return ItemService(db)


AvailabilityDependency = Depends(get_availability_service)
BookingDependency = Depends(get_booking_service)
ItemDependency = Depends(get_item_service)
