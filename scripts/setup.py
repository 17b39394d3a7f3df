#!/usr/bin/env python3
"""Setup script for the fleet booking service: migrations plus sample bookings."""

import asyncio
import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add the server directory to the Python path
server_dir = Path(__file__).parent.parent / "server"
sys.path.insert(0, str(server_dir))

from alembic import command  # noqa: E402
from alembic.config import Config  # noqa: E402
from sqlalchemy import func, select  # noqa: E402

from fleet_booking.core.database import async_session_factory, close_db  # noqa: E402
from fleet_booking.models import Booking, BookingStatus  # noqa: E402
from fleet_booking.services.booking_service import calculate_cost  # noqa: E402

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def setup_database():
    """Bring the schema up to date with Alembic."""
    logger.info("Running database migrations...")
    alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(server_dir / "db" / "alembic"))
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")


SAMPLE_TRIPS = [
    # user, vehicle, status, days from now, pickup, distance, duration
    ("user-1", "vehicle-1", BookingStatus.COMPLETED, -3, "Alexanderplatz 1, Berlin", 12.4, 31),
    ("user-1", "vehicle-2", BookingStatus.CONFIRMED, 1, "Kurfurstendamm 21, Berlin", None, None),
    ("user-2", "vehicle-3", BookingStatus.PENDING, 2, "Friedrichstrasse 43, Berlin", None, None),
    ("user-2", "vehicle-1", BookingStatus.CANCELLED, -1, "Warschauer Strasse 9, Berlin", None, None),
]


async def create_sample_data():
    """Create a handful of bookings in different states."""
    logger.info("Creating sample data...")

    async with async_session_factory() as db:
        try:
            existing = await db.execute(select(func.count()).select_from(Booking))
            if existing.scalar() > 0:
                logger.info("Sample data already exists, skipping...")
                return

            now = datetime.now(timezone.utc)
            for user_id, vehicle_id, status, days, pickup, distance, duration in SAMPLE_TRIPS:
                booking = Booking(
                    user_id=user_id,
                    vehicle_id=vehicle_id,
                    status=status.value,
                    start_time=now + timedelta(days=days),
                    pickup_latitude=52.52,
                    pickup_longitude=13.405,
                    pickup_address=pickup,
                )
                if status == BookingStatus.COMPLETED:
                    booking.end_time = booking.start_time + timedelta(minutes=duration)
                    booking.distance = distance
                    booking.duration = duration
                    booking.cost = calculate_cost(distance, duration)
                db.add(booking)

            await db.commit()
            logger.info(f"Created {len(SAMPLE_TRIPS)} sample bookings")

        except Exception as e:
            await db.rollback()
            logger.error(f"Failed to create sample data: {e}")
            raise

    await close_db()


def main():
    """Main setup function."""
    logger.info("Starting fleet booking service setup...")

    setup_database()
    asyncio.run(create_sample_data())

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: cd server && uvicorn fleet_booking.main:app --reload --port 8003")


if __name__ == "__main__":
    main()
