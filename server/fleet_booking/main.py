"""FastAPI application initialization and configuration."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .clients import (
    HttpUserValidator,
    HttpVehicleCoordinator,
    StubUserValidator,
    StubVehicleCoordinator,
)
from .core.config import settings
from .core.database import close_db, engine, init_db
from .core.exceptions import (
    ProblemDetailsException,
    generic_exception_handler,
    problem_details_handler,
    request_validation_handler,
)
from .core.middleware import setup_middleware
from .core.observability import (
    SERVICE_NAME,
    instrument_fastapi,
    instrument_sqlalchemy,
    setup_metrics,
    setup_structured_logging,
    setup_tracing,
)
from .routers import bookings_router, health_router, internal_router, metrics_router
from .workers import VehicleStatusDispatcher, WorkerManager

# Configure structured logging
setup_structured_logging()

# Configure traditional logging for library and infrastructure logs
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)


def build_collaborators():
    """
    Create the user and vehicle service adapters.

    Returns the validator, the coordinator and the HTTP clients that must be
    closed on shutdown.
    """
    if settings.use_stub_adapters:
        logger.warning("Using in-memory stub adapters for the user and vehicle services")
        return StubUserValidator(), StubVehicleCoordinator(), []

    user_validator = HttpUserValidator(settings.user_service_url, timeout=settings.adapter_timeout_seconds)
    vehicle_coordinator = HttpVehicleCoordinator(
        settings.vehicle_service_url, timeout=settings.adapter_timeout_seconds
    )
    return user_validator, vehicle_coordinator, [user_validator, vehicle_coordinator]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Handles startup and shutdown events for the FastAPI application.
    """
    # Startup
    logger.info("Starting FastAPI application")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.debug}")

    try:
        # Setup observability
        setup_tracing(SERVICE_NAME)
        setup_metrics(SERVICE_NAME)
        instrument_sqlalchemy(engine)
        logger.info("Observability setup completed")

        # Initialize database
        await init_db()
        logger.info("Database initialized successfully")

        # Collaborators and the vehicle status dispatcher
        user_validator, vehicle_coordinator, http_clients = build_collaborators()
        dispatcher = VehicleStatusDispatcher(
            vehicle_coordinator,
            timeout_seconds=settings.adapter_timeout_seconds,
            queue_size=settings.dispatcher_queue_size,
            dead_letter_size=settings.dead_letter_size,
            drain_seconds=settings.dispatcher_drain_seconds,
        )
        app.state.user_validator = user_validator
        app.state.vehicle_coordinator = vehicle_coordinator
        app.state.vehicle_status_dispatcher = dispatcher

        worker_manager = WorkerManager()
        worker_manager.register("vehicle_status", dispatcher)
        await worker_manager.start_all()
        logger.info("Background workers started successfully")
    except Exception as e:
        logger.error(f"Failed to initialize application: {e}")
        raise

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down FastAPI application")

    try:
        # Pending vehicle status updates get drained first
        await worker_manager.stop_all()
        logger.info("Background workers stopped")

        for client in http_clients:
            await client.close()

        # Close database connections
        await close_db()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error during application cleanup: {e}")

    logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title="Fleet Booking API",
        description="Booking lifecycle service for vehicle rentals: creation, confirmation, start, completion, cancellation and reporting",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "traceparent", "tracestate"],
    )

    # Setup custom middleware
    setup_middleware(app, enable_logging=True)

    # Instrument FastAPI with OpenTelemetry
    instrument_fastapi(app)

    # Register exception handlers
    app.add_exception_handler(ProblemDetailsException, problem_details_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # Register API routers
    app.include_router(health_router)
    app.include_router(bookings_router)
    app.include_router(internal_router)
    app.include_router(metrics_router)

    logger.info("FastAPI application created and configured")

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "fleet_booking.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )
