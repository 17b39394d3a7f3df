"""Capabilities the booking service consumes from the user and vehicle services."""

from datetime import datetime
from enum import Enum
from typing import Protocol, runtime_checkable


class VehicleStatus(str, Enum):
    """Vehicle states the booking lifecycle propagates."""
    AVAILABLE = "available"
    IN_USE = "in_use"


class AdapterError(Exception):
    """A collaborator service could not be reached or answered unexpectedly."""

    def __init__(self, service: str, operation: str, reason: str):
        super().__init__(f"{service}.{operation} failed: {reason}")
        self.service = service
        self.operation = operation
        self.reason = reason


@runtime_checkable
class UserValidator(Protocol):
    async def validate(self, user_id: str) -> None:
        """
        Return normally if the user may book.

        Raises:
            InvalidUserError: If the user does not exist or is not active
            AdapterError: If the user service cannot answer
        """
        ...


@runtime_checkable
class VehicleCoordinator(Protocol):
    async def is_available(self, vehicle_id: str, start_time: datetime) -> bool:
        """
        Return True if the vehicle can be booked at ``start_time``.

        Raises:
            AdapterError: If the vehicle service cannot answer
        """
        ...

    async def set_status(self, vehicle_id: str, status: VehicleStatus) -> None:
        """
        Record the vehicle's new status in the vehicle service.

        Raises:
            AdapterError: If the update was not accepted
        """
        ...
