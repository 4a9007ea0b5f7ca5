"""Booking and booking line model definitions."""

from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .item import Item


class BookingStatus(str, Enum):
    """Booking status enumeration."""
    CONFIRMED = "CONFIRMED"
    OUT = "OUT"
    RETURNED = "RETURNED"
    CANCELLED = "CANCELLED"

    @property
    def reserves_capacity(self) -> bool:
        """Only confirmed and checked-out bookings hold inventory."""
        return self in RESERVING_STATUSES


RESERVING_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.OUT})

# Terminal statuses have no outgoing edges
ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.CONFIRMED: frozenset({BookingStatus.OUT, BookingStatus.CANCELLED}),
    BookingStatus.OUT: frozenset({BookingStatus.RETURNED, BookingStatus.CANCELLED}),
    BookingStatus.RETURNED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


class Booking(Base):
    """Booking entity reserving one or more items over an inclusive date range."""

    __tablename__ = "bookings"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    customer_ref: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[BookingStatus] = mapped_column(
        String(20),
        nullable=False,
        default=BookingStatus.CONFIRMED,
        index=True
    )
    reference: Mapped[str | None] = mapped_column(String(128), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        nullable=False,
        server_default=func.now(),
        server_onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_booking_end_not_before_start"),
        CheckConstraint(
            "status IN ('CONFIRMED', 'OUT', 'RETURNED', 'CANCELLED')",
            name="ck_booking_status_valid"
        ),
        CheckConstraint("length(customer_ref) > 0", name="ck_booking_customer_ref_not_empty"),
        Index("ix_bookings_date_range", "start_date", "end_date"),
    )

    items: Mapped[list["BookingItem"]] = relationship(
        "BookingItem",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingItem.position"
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, customer_ref='{self.customer_ref}', "
            f"start_date={self.start_date}, end_date={self.end_date}, status={self.status})>"
        )


class BookingItem(Base):
    """Reservation line: this booking reserves ``quantity`` units of one item."""

    __tablename__ = "booking_items"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    booking_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    item_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("items.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_booking_item_quantity_positive"),
    )

    booking: Mapped["Booking"] = relationship("Booking", back_populates="items")
    item: Mapped["Item"] = relationship("Item", back_populates="booking_items")

    def __repr__(self) -> str:
        return f"<BookingItem(booking_id={self.booking_id}, item_id={self.item_id}, quantity={self.quantity})>"
