"""
APScheduler setup for housekeeping jobs.

The only job today retires trips whose travel date has passed, so they stop
showing up as matching candidates.
"""

import logging
import os
from datetime import date
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.jobstores.memory import MemoryJobStore
from sqlalchemy.orm import Session

from tripmate.database import SessionLocal
from tripmate.models.trip import Trip, TripStatus
from tripmate.config import get_settings

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler: Optional[AsyncIOScheduler] = None

settings = get_settings()


def get_scheduler() -> AsyncIOScheduler:
    """Get or create the global scheduler instance."""
    global scheduler
    if scheduler is None:
        tz = os.environ.get('TZ', 'UTC')
        logger.info(f"Scheduler using timezone: {tz}")

        scheduler = AsyncIOScheduler(
            jobstores={'default': MemoryJobStore()},
            timezone=tz
        )
        _setup_scheduled_jobs()

    return scheduler


def _setup_scheduled_jobs():
    scheduler.add_job(
        expire_trips_job,
        trigger=IntervalTrigger(hours=settings.trip_expiry_interval_hours),
        id='trip_expiry',
        name='Complete Past Trips',
        replace_existing=True,
        max_instances=1,
    )
    logger.info(f"Scheduled jobs configured: trip expiry every {settings.trip_expiry_interval_hours}h")


def expire_past_trips(db: Session, today: Optional[date] = None) -> int:
    """Mark active trips dated before ``today`` as completed. Returns how many changed."""
    cutoff = (today or date.today()).isoformat()
    # travel_date is stored as YYYY-MM-DD, so string order is date order
    trips = db.query(Trip).filter(
        Trip.status == TripStatus.ACTIVE.value,
        Trip.travel_date < cutoff,
    ).all()

    for trip in trips:
        trip.status = TripStatus.COMPLETED.value

    db.commit()
    return len(trips)


async def expire_trips_job():
    db = SessionLocal()
    try:
        count = expire_past_trips(db)
        if count:
            logger.info(f"Marked {count} past trip(s) as completed")
    except Exception as e:
        logger.error(f"Trip expiry job failed: {e}")
        db.rollback()
    finally:
        db.close()


def start_scheduler():
    if not settings.scheduler_enabled:
        logger.info("Scheduler disabled by configuration")
        return
    sched = get_scheduler()
    if not sched.running:
        sched.start()
        logger.info("Scheduler started")


def stop_scheduler():
    global scheduler
    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
    scheduler = None
