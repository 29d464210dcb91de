# requisition/routers/health.py
"""
System health check endpoint.
Returns status of the backend and database connectivity.
"""

from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from requisition.database import get_db
from requisition.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db)):
    result = {
        "status": "OK",
        "message": "Vehicle Requisition System API is running",
        "timestamp": datetime.utcnow().isoformat(),
        "database": "unknown",
    }
    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        logger.error(f"[HEALTH] Database check failed: {e}")
        result["database"] = "error"
        result["status"] = "degraded"
    return result
