"""Item-related Pydantic schemas."""

from decimal import Decimal

from pydantic import BaseModel, Field


class CreateItemRequest(BaseModel):
    """Request schema for creating an inventory item."""

    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    unit: str = Field("pcs", min_length=1, max_length=10, pattern=r"^[A-Za-z\s]+$", description="Unit label")
    total_quantity: int = Field(..., ge=0, description="Units owned; the daily capacity ceiling")
    price: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2, description="Optional unit price")
    notes: str | None = Field(None, max_length=2000, description="Free-form notes")


class GetItemRequest(BaseModel):
    """Request schema for getting an item."""

    item_id: str = Field(..., description="Item to retrieve")


class Item(BaseModel):
    """Item response schema."""

    id: str = Field(..., description="Unique item ID")
    name: str = Field(..., description="Display name")
    unit: str = Field(..., description="Unit label")
    total_quantity: int = Field(..., ge=0, description="Units owned")
    price: float | None = Field(None, description="Unit price")
    notes: str | None = Field(None, description="Free-form notes")

    model_config = {"from_attributes": True}


class ListItemsResponse(BaseModel):
    """Response schema for listing items."""

    items: list[Item] = Field(..., description="Inventory items ordered by name")
