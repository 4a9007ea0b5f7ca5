"""Property-based tests for admission and ledger invariants."""

from datetime import date, timedelta

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from rentals.core.dates import iter_days
from rentals.models.booking import BookingStatus
from rentals.repositories import InMemoryBookingStore
from rentals.schemas.availability import AdmissionRejected
from rentals.schemas.booking import BookingItemRequest, CreateBookingRequest
from rentals.services import AvailabilityService, BookingService

BASE_DAY = date(2026, 3, 1)

# Strategies for generating test data
day_offsets = st.integers(min_value=0, max_value=12)
durations = st.integers(min_value=0, max_value=5)
quantities = st.integers(min_value=1, max_value=12)
capacities = st.integers(min_value=0, max_value=30)
statuses = st.sampled_from(list(BookingStatus))
existing_bookings = st.lists(st.tuples(day_offsets, durations, quantities, statuses), max_size=12)


def _range(offset: int, duration: int) -> tuple[date, date]:
    start = BASE_DAY + timedelta(days=offset)
    return start, start + timedelta(days=duration)


@pytest.mark.asyncio
@settings(max_examples=75, deadline=None)
@given(
    capacity=capacities,
    bookings=existing_bookings,
    request_offset=day_offsets,
    request_duration=durations,
    requested=quantities,
)
async def test_rejected_iff_some_day_lacks_units(capacity, bookings, request_offset, request_duration, requested):
    """An admission is refused exactly when some requested day has fewer free units than requested."""
    store = InMemoryBookingStore()
    item = store.add_item("Stage riser", capacity)
    for offset, duration, quantity, status in bookings:
        start, end = _range(offset, duration)
        store.seed_booking(start, end, [(item.id, quantity)], status=status)

    start, end = _range(request_offset, request_duration)
    result = await AvailabilityService(store).admit_booking([(item.id, requested)], start, end)

    def reserved(day: date) -> int:
        return sum(
            quantity
            for offset, duration, quantity, status in bookings
            if status.reserves_capacity and _range(offset, duration)[0] <= day <= _range(offset, duration)[1]
        )

    short_days = [day for day in iter_days(start, end) if capacity - reserved(day) < requested]

    if short_days:
        assert isinstance(result, AdmissionRejected)
        assert result.date == short_days[0]
        assert result.available == capacity - reserved(short_days[0])
    else:
        assert result.accepted


@pytest.mark.asyncio
@settings(max_examples=50, deadline=None)
@given(
    capacity=capacities,
    requests=st.lists(st.tuples(day_offsets, durations, quantities), min_size=1, max_size=15),
)
async def test_accepted_bookings_never_exceed_capacity(capacity, requests):
    """Whatever sequence of bookings is attempted, no day ends up oversubscribed."""
    store = InMemoryBookingStore()
    item = store.add_item("Stage riser", capacity)
    service = BookingService(store)

    for index, (offset, duration, quantity) in enumerate(requests):
        start, end = _range(offset, duration)
        await service.create_booking(
            CreateBookingRequest(
                customer_ref=f"customer_{index}",
                start_date=start,
                end_date=end,
                items=[BookingItemRequest(item_id=str(item.id), quantity=quantity)],
            )
        )

    report = await AvailabilityService(store).check_availability(item.id, BASE_DAY, BASE_DAY + timedelta(days=20))
    assert all(day.available >= 0 for day in report.days)
