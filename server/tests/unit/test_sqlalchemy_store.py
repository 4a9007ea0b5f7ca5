"""Tests for the SQLAlchemy booking store against in-memory SQLite."""

from datetime import date
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from rentals.core.exceptions import ConcurrencyConflictError, StoreUnavailableError
from rentals.models.booking import BookingStatus
from rentals.repositories.base import NewBooking
from rentals.schemas.availability import AdmissionRejected
from rentals.schemas.booking import BookingItemRequest, CreateBookingRequest, UpdateBookingRequest
from rentals.schemas.item import CreateItemRequest
from rentals.services import AvailabilityService, BookingService, ItemService


async def _create_item(session, name="Folding chair", total_quantity=100):
    return await ItemService(session).create_item(CreateItemRequest(name=name, total_quantity=total_quantity))


async def _insert(store, item, start, end, quantity, status=BookingStatus.CONFIRMED):
    async with store.reservation_scope([item.id]):
        booking_id = await store.insert_booking(
            NewBooking(
                customer_ref="customer_1",
                start_date=start,
                end_date=end,
                status=status,
                lines=[(item.id, quantity)],
            )
        )
    return booking_id


@pytest.mark.asyncio
async def test_find_overlapping_applies_closed_interval_and_status_filter(test_session, sql_store):
    chairs = await _create_item(test_session)
    inside = await _insert(sql_store, chairs, date(2025, 12, 10), date(2025, 12, 15), 7)
    await _insert(sql_store, chairs, date(2025, 12, 1), date(2025, 12, 9), 3)
    await _insert(sql_store, chairs, date(2025, 12, 16), date(2025, 12, 20), 3)
    await _insert(sql_store, chairs, date(2025, 12, 12), date(2025, 12, 12), 9, status=BookingStatus.RETURNED)

    on_start = await sql_store.find_overlapping(chairs.id, date(2025, 12, 10), date(2025, 12, 10))
    on_end = await sql_store.find_overlapping(chairs.id, date(2025, 12, 15), date(2025, 12, 15))

    assert [line.booking_id for line in on_start] == [inside]
    assert [line.booking_id for line in on_end] == [inside]
    assert on_start[0].quantity == 7
    assert on_start[0].status == BookingStatus.CONFIRMED


@pytest.mark.asyncio
async def test_find_overlapping_excludes_booking(test_session, sql_store):
    chairs = await _create_item(test_session)
    booking_id = await _insert(sql_store, chairs, date(2025, 11, 1), date(2025, 11, 2), 5)

    lines = await sql_store.find_overlapping(
        chairs.id, date(2025, 11, 1), date(2025, 11, 2), exclude_booking_id=booking_id
    )

    assert lines == []


@pytest.mark.asyncio
async def test_reservation_scope_rolls_back_on_error(test_session, sql_store):
    chairs = await _create_item(test_session)
    chairs_id = chairs.id

    with pytest.raises(RuntimeError):
        async with sql_store.reservation_scope([chairs_id]):
            await sql_store.insert_booking(
                NewBooking(
                    customer_ref="customer_1",
                    start_date=date(2025, 11, 1),
                    end_date=date(2025, 11, 1),
                    lines=[(chairs_id, 1)],
                )
            )
            raise RuntimeError("abort")

    lines = await sql_store.find_overlapping(chairs_id, date(2025, 11, 1), date(2025, 11, 1))
    assert lines == []


@pytest.mark.asyncio
async def test_booking_lifecycle_over_sql(test_session, sql_store):
    chairs = await _create_item(test_session)
    tables = await _create_item(test_session, name="Round table", total_quantity=4)
    service = BookingService(sql_store, AvailabilityService(sql_store))

    booking = await service.create_booking(
        CreateBookingRequest(
            customer_ref="customer_1",
            start_date=date(2025, 11, 20),
            end_date=date(2025, 11, 25),
            items=[
                BookingItemRequest(item_id=str(chairs.id), quantity=40),
                BookingItemRequest(item_id=str(tables.id), quantity=2),
            ],
        )
    )
    assert [line.item_id for line in booking.items] == [chairs.id, tables.id]
    assert booking.created_at is not None

    rejected = await service.create_booking(
        CreateBookingRequest(
            customer_ref="customer_2",
            start_date=date(2025, 11, 22),
            end_date=date(2025, 11, 27),
            items=[BookingItemRequest(item_id=str(chairs.id), quantity=61)],
        )
    )
    assert isinstance(rejected, AdmissionRejected)
    assert rejected.date == date(2025, 11, 22)
    assert rejected.available == 60

    updated = await service.update_booking(
        UpdateBookingRequest(
            booking_id=str(booking.id),
            customer_ref="customer_1",
            start_date=date(2025, 11, 20),
            end_date=date(2025, 11, 21),
            items=[BookingItemRequest(item_id=str(chairs.id), quantity=100)],
        )
    )
    assert [(line.item_id, line.quantity) for line in updated.items] == [(chairs.id, 100)]

    returned = await service.transition_status(booking.id, BookingStatus.OUT)
    assert returned.status == BookingStatus.OUT.value


@pytest.mark.asyncio
async def test_update_status_is_compare_and_set(test_session, sql_store):
    chairs = await _create_item(test_session)
    booking_id = await _insert(sql_store, chairs, date(2025, 11, 1), date(2025, 11, 1), 1)

    assert await sql_store.update_status(booking_id, BookingStatus.CONFIRMED, BookingStatus.OUT)
    assert not await sql_store.update_status(booking_id, BookingStatus.CONFIRMED, BookingStatus.CANCELLED)
    assert not await sql_store.update_status(uuid4(), BookingStatus.CONFIRMED, BookingStatus.OUT)


@pytest.mark.asyncio
async def test_driver_errors_are_translated(sql_store):
    class LockedError(Exception):
        pass

    with pytest.raises(ConcurrencyConflictError):
        async with sql_store._translate_errors(["item"]):
            raise OperationalError("INSERT", {}, LockedError("database is locked"))

    with pytest.raises(StoreUnavailableError):
        async with sql_store._translate_errors():
            raise OperationalError("SELECT 1", {}, LockedError("connection refused"))

    with pytest.raises(StoreUnavailableError):
        async with sql_store._translate_errors():
            raise ConnectionRefusedError("connection refused")
