#!/usr/bin/env python3
"""
Standalone database initialization script.

Creates the readings table for the configured DATABASE_URL and optionally
seeds a user with demo readings.
"""

import argparse
import sys
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from uuid import UUID

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config import settings
from domain.enums import MealType, ActivityLevel
from domain.models import SessionLocal, engine, init_database
from repositories import ReadingRepository

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("ander.init_db")

# (hour, meal, typical value, carbs, activity)
DEMO_DAY = [
    (7, MealType.FASTED, 88.0, 0, ActivityLevel.LOW),
    (9, MealType.BREAKFAST, 128.0, 45, ActivityLevel.LOW),
    (14, MealType.LUNCH, 134.0, 60, ActivityLevel.MODERATE),
    (16, MealType.SNACK, 112.0, 20, ActivityLevel.HIGH),
    (20, MealType.DINNER, 146.0, 70, ActivityLevel.LOW),
]


def seed(user_id: UUID, days: int) -> int:
    """Insert `days` days of demo readings ending today; returns the count"""
    today = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0)
    db = SessionLocal()
    try:
        repo = ReadingRepository(db)
        created = 0
        for offset in range(days, 0, -1):
            day = today - timedelta(days=offset)
            for hour, meal, value, carbs, activity in DEMO_DAY:
                repo.create_reading(
                    user_id,
                    {
                        "blood_sugar": value + (offset % 3) * 4 - 4,
                        "meal_type": meal,
                        "carbs": carbs,
                        "activity_level": activity,
                        "timestamp": day.replace(hour=hour),
                    },
                )
                created += 1
        return created
    finally:
        db.close()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Initialize the Ander SQL database")
    parser.add_argument("--seed-user", type=UUID, help="Seed demo readings for this user id")
    parser.add_argument("--days", type=int, default=7, help="Days of demo readings to seed")
    args = parser.parse_args(argv)

    logger.info(f"Initializing database at {settings.database_url}")
    try:
        init_database()
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        return 1

    from sqlalchemy import inspect

    tables = inspect(engine).get_table_names()
    logger.info(f"Tables present: {', '.join(tables)}")

    if args.seed_user:
        count = seed(args.seed_user, args.days)
        logger.info(f"Seeded {count} readings for user {args.seed_user}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
