"""FastAPI dependencies for database sessions, acting user, and collaborators."""

from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..clients.interfaces import UserValidator, VehicleCoordinator
from ..services.booking_query_service import BookingQueryService
from ..services.booking_service import BookingService
from ..workers.vehicle_status_dispatcher import VehicleStatusDispatcher
from .database import get_db
from .exceptions import AuthenticationError


async def get_acting_user(
    x_user_id: Optional[str] = Header(None, alias="X-User-ID"),
) -> str:
    """
    Identify the user performing the request.

    The gateway authenticates callers and forwards their id in X-User-ID.

    Raises:
        AuthenticationError: If the header is missing or blank
    """
    if x_user_id is None or not x_user_id.strip():
        raise AuthenticationError()
    return x_user_id.strip()


# Collaborators are built once in the application lifespan and kept on app.state

def get_user_validator(request: Request) -> UserValidator:
    return request.app.state.user_validator


def get_vehicle_coordinator(request: Request) -> VehicleCoordinator:
    return request.app.state.vehicle_coordinator


def get_dispatcher(request: Request) -> VehicleStatusDispatcher:
    return request.app.state.vehicle_status_dispatcher


async def get_booking_service(
    db: AsyncSession = Depends(get_db),
    user_validator: UserValidator = Depends(get_user_validator),
    vehicle_coordinator: VehicleCoordinator = Depends(get_vehicle_coordinator),
    dispatcher: VehicleStatusDispatcher = Depends(get_dispatcher),
) -> BookingService:
    return BookingService(db, user_validator, vehicle_coordinator, dispatcher)


async def get_query_service(db: AsyncSession = Depends(get_db)) -> BookingQueryService:
    return BookingQueryService(db)


ActingUser = Depends(get_acting_user)
LifecycleService = Depends(get_booking_service)
QueryService = Depends(get_query_service)
DatabaseSession = Depends(get_db)
