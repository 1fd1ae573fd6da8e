from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from tripmate.api import trips, route, groups, emergency, profile, health
from tripmate.config import get_settings
from tripmate.database import create_tables
from tripmate.errors import register_error_handlers
from tripmate.scheduler import start_scheduler, stop_scheduler
from tripmate.services.geocoding import shutdown_geocoder
from tripmate.services.messaging import shutdown_notifier
from tripmate.services.routing import shutdown_router

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Starting TripMate")

    if settings.database_url.startswith("sqlite"):
        logger.info("SQLite detected - creating tables if needed")
        create_tables()

    try:
        start_scheduler()
    except Exception as e:
        logger.error(f"❌ Scheduler startup failed: {e}")

    yield

    logger.info("🛑 Shutting down TripMate")

    try:
        stop_scheduler()
        await shutdown_geocoder()
        await shutdown_router()
        await shutdown_notifier()
        logger.info("✅ HTTP clients closed")
    except Exception as e:
        logger.error(f"❌ Shutdown error: {e}")


app = FastAPI(
    title="TripMate",
    description="Trip matching, route scoring and group coordination for travel companions",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(trips.router, prefix="/api/trips", tags=["trips"])
app.include_router(route.router, prefix="/api/route", tags=["route"])
app.include_router(groups.router, prefix="/api/groups", tags=["groups"])
app.include_router(emergency.contacts_router, prefix="/api/emergency-contacts", tags=["emergency"])
app.include_router(emergency.alerts_router, prefix="/api/emergency-alerts", tags=["emergency"])
app.include_router(profile.router, prefix="/api/profile", tags=["profile"])
app.include_router(health.router, tags=["health"])
