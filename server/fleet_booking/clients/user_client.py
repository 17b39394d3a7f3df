"""User service client implementing the UserValidator capability."""

from ..core.exceptions import InvalidUserError
from .base import BaseClient
from .interfaces import AdapterError


class HttpUserValidator(BaseClient):
    """Validates booking users against ``GET /users/{id}`` of the user service."""

    service_name = "user-service"

    async def validate(self, user_id: str) -> None:
        response = await self._request("validate", "GET", f"/users/{user_id}")

        if response.status_code == 404:
            raise InvalidUserError(user_id, reason="user not found")
        if response.is_error:
            raise AdapterError(self.service_name, "validate", f"HTTP {response.status_code}")

        user = self._json("validate", response)
        status = user.get("status", "active")
        if status != "active":
            raise InvalidUserError(user_id, reason=f"user is {status}")
