"""Adapters for the user and vehicle services."""

from .interfaces import AdapterError, UserValidator, VehicleCoordinator, VehicleStatus
from .stub import StubUserValidator, StubVehicleCoordinator
from .user_client import HttpUserValidator
from .vehicle_client import HttpVehicleCoordinator

__all__ = [
    "AdapterError",
    "UserValidator",
    "VehicleCoordinator",
    "VehicleStatus",
    "HttpUserValidator",
    "HttpVehicleCoordinator",
    "StubUserValidator",
    "StubVehicleCoordinator",
]
