"""Background workers for the booking service."""

from .base import BaseWorker
from .manager import WorkerManager
from .vehicle_status_dispatcher import DeadLetter, VehicleStatusDispatcher, VehicleStatusUpdate

__all__ = [
    "BaseWorker",
    "DeadLetter",
    "VehicleStatusDispatcher",
    "VehicleStatusUpdate",
    "WorkerManager",
]
