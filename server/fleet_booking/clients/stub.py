"""In-memory adapters for local development and tests."""

import asyncio
from datetime import datetime
from typing import Iterable, Optional

from ..core.exceptions import InvalidUserError
from .interfaces import AdapterError, VehicleStatus


class StubUserValidator:
    """
    Accepts every user unless told otherwise.

    ``known_users`` restricts validation to a fixed set; ``inactive_users``
    are rejected even when known.
    """

    def __init__(
        self,
        known_users: Optional[Iterable[str]] = None,
        inactive_users: Iterable[str] = (),
        fail_with: Optional[Exception] = None,
    ):
        self.known_users = set(known_users) if known_users is not None else None
        self.inactive_users = set(inactive_users)
        self.fail_with = fail_with
        self.calls: list[str] = []

    async def validate(self, user_id: str) -> None:
        self.calls.append(user_id)
        if self.fail_with is not None:
            raise self.fail_with
        if self.known_users is not None and user_id not in self.known_users:
            raise InvalidUserError(user_id, reason="user not found")
        if user_id in self.inactive_users:
            raise InvalidUserError(user_id, reason="user is inactive")


class StubVehicleCoordinator:
    """
    Tracks vehicle statuses in a dict.

    Unknown vehicles are available. ``fail_set_status`` makes status updates
    raise AdapterError; ``set_status_delay`` simulates a slow vehicle service.
    """

    def __init__(
        self,
        statuses: Optional[dict[str, str]] = None,
        fail_set_status: bool = False,
        set_status_delay: float = 0.0,
    ):
        self.statuses: dict[str, str] = dict(statuses or {})
        self.fail_set_status = fail_set_status
        self.set_status_delay = set_status_delay
        self.status_updates: list[tuple[str, VehicleStatus]] = []
        self.availability_checks: list[tuple[str, datetime]] = []

    async def is_available(self, vehicle_id: str, start_time: datetime) -> bool:
        self.availability_checks.append((vehicle_id, start_time))
        return self.statuses.get(vehicle_id, VehicleStatus.AVAILABLE.value) == VehicleStatus.AVAILABLE.value

    async def set_status(self, vehicle_id: str, status: VehicleStatus) -> None:
        if self.set_status_delay:
            await asyncio.sleep(self.set_status_delay)
        if self.fail_set_status:
            raise AdapterError("vehicle-service", "set_status", "stubbed failure")
        self.statuses[vehicle_id] = VehicleStatus(status).value
        self.status_updates.append((vehicle_id, VehicleStatus(status)))
