"""Item router for inventory item operations."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..core.dependencies import ItemDependency
from ..schemas.item import CreateItemRequest, GetItemRequest, Item, ListItemsResponse
from ..services.availability_service import parse_id
from ..services.item_service import ItemService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/item", tags=["item"])


def _convert_item_to_schema(item_model) -> Item:
    """Convert item model to schema."""
    return Item(
        id=str(item_model.id),
        name=item_model.name,
        unit=item_model.unit,
        total_quantity=item_model.total_quantity,
        price=float(item_model.price) if item_model.price is not None else None,
        notes=item_model.notes
    )


@router.post("/create", response_model=Item, status_code=201)
async def create_item(
    request: CreateItemRequest,
    service: ItemService = ItemDependency
) -> JSONResponse:
    """Create a new inventory item."""
    item = await service.create_item(request)
    response_data = _convert_item_to_schema(item)
    return JSONResponse(status_code=201, content=response_data.model_dump(mode="json"))


@router.post("/get", response_model=Item)
async def get_item(
    request: GetItemRequest,
    service: ItemService = ItemDependency
) -> JSONResponse:
    """Get item details by ID."""
    item = await service.get_item_by_id_or_raise(parse_id(request.item_id, "item_id"))
    response_data = _convert_item_to_schema(item)
    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))


@router.post("/list", response_model=ListItemsResponse)
async def list_items(service: ItemService = ItemDependency) -> JSONResponse:
    """List all inventory items ordered by name."""
    items = await service.list_items()
    response_data = ListItemsResponse(items=[_convert_item_to_schema(item) for item in items])

    logger.debug("Items listed", extra={"count": len(items)})

    return JSONResponse(status_code=200, content=response_data.model_dump(mode="json"))
