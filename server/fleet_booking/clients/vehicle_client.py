"""Vehicle service client implementing the VehicleCoordinator capability."""

from datetime import datetime

from .base import BaseClient
from .interfaces import AdapterError, VehicleStatus


class HttpVehicleCoordinator(BaseClient):
    """Talks to the vehicle service's ``/vehicles`` resource."""

    service_name = "vehicle-service"

    async def is_available(self, vehicle_id: str, start_time: datetime) -> bool:
        # The vehicle service keeps no schedule; its current status is the answer
        response = await self._request(
            "is_available",
            "GET",
            f"/vehicles/{vehicle_id}",
            params={"at": start_time.isoformat()},
        )

        if response.status_code == 404:
            return False
        if response.is_error:
            raise AdapterError(self.service_name, "is_available", f"HTTP {response.status_code}")

        vehicle = self._json("is_available", response)
        return vehicle.get("status") == VehicleStatus.AVAILABLE.value

    async def set_status(self, vehicle_id: str, status: VehicleStatus) -> None:
        response = await self._request(
            "set_status",
            "PUT",
            f"/vehicles/{vehicle_id}/status",
            json={"status": VehicleStatus(status).value},
        )
        if response.is_error:
            raise AdapterError(self.service_name, "set_status", f"HTTP {response.status_code}")
