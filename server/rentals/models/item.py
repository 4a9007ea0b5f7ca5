"""Inventory item model definition."""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Integer, Numeric, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .booking import BookingItem


class Item(Base):
    """Rentable unit type; ``total_quantity`` is the capacity ceiling on every day."""

    __tablename__ = "items"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    unit: Mapped[str] = mapped_column(String(10), nullable=False, default="pcs")
    total_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
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
        CheckConstraint("total_quantity >= 0", name="ck_item_total_quantity_non_negative"),
        CheckConstraint("price IS NULL OR price >= 0", name="ck_item_price_non_negative"),
        CheckConstraint("length(name) > 0", name="ck_item_name_not_empty"),
    )

    booking_items: Mapped[list["BookingItem"]] = relationship("BookingItem", back_populates="item")

    def __repr__(self) -> str:
        return f"<Item(id={self.id}, name='{self.name}', total_quantity={self.total_quantity})>"
