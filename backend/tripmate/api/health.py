from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from tripmate.database import get_db
from tripmate.services.messaging import TwilioNotifier, get_notifier

router = APIRouter()


@router.get("/health")
async def health_check(
    db: Session = Depends(get_db),
    notifier: TwilioNotifier = Depends(get_notifier),
):
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"

    return {
        "status": "ok" if db_status == "healthy" else "degraded",
        "database": db_status,
        "messaging": "configured" if notifier.is_configured else "not configured",
    }


@router.get("/ping")
async def ping():
    """Simple ping endpoint for load balancer checks."""
    return {"status": "ok"}
