"""FastAPI routers package."""

from .availability import router as availability_router
from .booking import router as booking_router
from .health import router as health_router
from .item import router as item_router
from .metrics import router as metrics_router

__all__ = [
    "availability_router",
    "booking_router",
    "health_router",
    "item_router",
    "metrics_router",
]
