#!/usr/bin/env python3
"""Setup script for the rental availability API."""

import asyncio
import logging
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

# Add the server directory to the Python path
server_dir = Path(__file__).parent.parent / "server"
sys.path.insert(0, str(server_dir))

from alembic import command
from alembic.config import Config
from sqlalchemy import func, select

from rentals.core.database import async_session_factory, close_db
from rentals.models import Item
from rentals.repositories import SqlAlchemyBookingStore
from rentals.schemas.booking import BookingItemRequest, CreateBookingRequest
from rentals.services import BookingService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SAMPLE_ITEMS = [
    ("Folding chair", "pcs", 200, Decimal("2.50")),
    ("Round table", "pcs", 40, Decimal("12.00")),
    ("Party tent", "pcs", 6, Decimal("180.00")),
    ("Tablecloth", "pcs", 120, Decimal("4.00")),
]


def run_migrations():
    """Bring the schema up to the latest Alembic revision."""
    alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(server_dir / "db" / "alembic"))

    logger.info("Running database migrations...")
    command.upgrade(alembic_cfg, "head")
    logger.info("Database migrations completed")


async def create_sample_data():
    """Create sample items and a few bookings that go through admission."""
    logger.info("Creating sample data...")

    async with async_session_factory() as db:
        existing_items = await db.execute(select(func.count()).select_from(Item))
        if existing_items.scalar() > 0:
            logger.info("Sample data already exists, skipping...")
            return

        items = [
            Item(name=name, unit=unit, total_quantity=total, price=price)
            for name, unit, total, price in SAMPLE_ITEMS
        ]
        db.add_all(items)
        await db.commit()

        chairs, tables, tent, _ = items
        service = BookingService(SqlAlchemyBookingStore(db))
        base_date = date.today() + timedelta(days=14)

        for offset, customer_ref, lines in [
            (0, "wedding-harbour-hall", [(chairs, 150), (tables, 20), (tent, 2)]),
            (1, "corporate-offsite", [(chairs, 40), (tables, 10)]),
            (7, "garden-party", [(tent, 4), (chairs, 60)]),
        ]:
            result = await service.create_booking(
                CreateBookingRequest(
                    customer_ref=customer_ref,
                    start_date=base_date + timedelta(days=offset),
                    end_date=base_date + timedelta(days=offset + 2),
                    items=[BookingItemRequest(item_id=str(item.id), quantity=quantity) for item, quantity in lines],
                )
            )
            logger.info(f"Sample booking for {customer_ref}: {type(result).__name__}")

    await close_db()
    logger.info("Sample data created successfully!")


def main():
    """Main setup function."""
    logger.info("Starting rental availability API setup...")

    # Migrations run their own event loop, so they go first
    run_migrations()

    asyncio.run(create_sample_data())

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: cd server && uvicorn rentals.main:app --reload")


if __name__ == "__main__":
    main()
