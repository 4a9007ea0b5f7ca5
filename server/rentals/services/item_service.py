"""Item service for inventory item operations."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ValidationError, NotFoundError
from ..models.item import Item
from ..schemas.item import CreateItemRequest

logger = logging.getLogger(__name__)


class ItemService:
    """Service for inventory item operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_item(self, request: CreateItemRequest) -> Item:
        """
        Create a new inventory item.

        Args:
            request: Item creation request

        Returns:
            Created item entity

        Raises:
            ValidationError: If the row violates a database constraint
        """
        item = Item(
            name=request.name,
            unit=request.unit.strip(),
            total_quantity=request.total_quantity,
            price=request.price,
            notes=request.notes
        )

        try:
            self.db.add(item)
            await self.db.commit()
            await self.db.refresh(item)
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(
                "Item creation failed due to integrity constraint",
                extra={"name": request.name, "error": str(e)}
            )
            raise ValidationError(detail="Item creation failed due to constraint violation")

        logger.info(
            "Item created successfully",
            extra={
                "item_id": str(item.id),
                "name": item.name,
                "total_quantity": item.total_quantity
            }
        )
        return item

    async def get_item_by_id(self, item_id: UUID) -> Optional[Item]:
        stmt = select(Item).where(Item.id == item_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_item_by_id_or_raise(self, item_id: UUID) -> Item:
        """
        Get item by ID or raise NotFoundError.

        Raises:
            NotFoundError: If item not found
        """
        item = await self.get_item_by_id(item_id)
        if not item:
            logger.warning("Item not found", extra={"item_id": str(item_id)})
            raise NotFoundError(resource_type="item", resource_id=str(item_id))
        return item

    async def list_items(self) -> list[Item]:
        """All items ordered by name."""
        stmt = select(Item).order_by(Item.name, Item.id)
        result = await self.db.execute(stmt)
        return list(result.scalars())
