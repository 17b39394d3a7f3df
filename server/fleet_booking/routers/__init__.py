"""FastAPI routers package."""

from .bookings import router as bookings_router
from .health import router as health_router
from .internal import router as internal_router
from .metrics import router as metrics_router

__all__ = [
    "bookings_router",
    "health_router",
    "internal_router",
    "metrics_router",
]
