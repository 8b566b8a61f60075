# app/routes/health.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import psutil
import datetime
import sys
import logging
from fastapi.responses import JSONResponse

from app.config import settings
from app.database import get_db, engine

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/health",
    tags=["Health Check"]
)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


@router.get("")
def health_check(db: Session = Depends(get_db)):
    """
    Liveness with a database round-trip. Returns 503 when the database is unreachable.
    """
    health_status = {
        "status": "healthy",
        "timestamp": datetime.datetime.now().isoformat(),
        "service": f"{settings.ORGANIZATION_SHORT_NAME} Scholarship Portal API",
        "version": "1.0.0",
    }

    try:
        db.execute(text("SELECT 1"))
        health_status["database"] = {
            "status": "connected",
            "type": engine.dialect.name,
        }
    except SQLAlchemyError as e:
        logger.error(f"Health check database failure: {e}")
        health_status["database"] = {
            "status": "disconnected",
            "error": str(e),
        }
        health_status["status"] = "degraded"

    health_status["system"] = {
        "python_version": sys.version.split()[0],
        "platform": sys.platform,
        "memory_percent": psutil.virtual_memory().percent,
    }
    health_status["email"] = "smtp" if settings.email_enabled else "simulated"

    logger.info(f"Health check completed: {health_status['status']}")
    return JSONResponse(
        status_code=200 if health_status["status"] == "healthy" else 503,
        content=health_status,
        headers=NO_CACHE_HEADERS,
    )


@router.get("/ping")
def ping():
    """Minimal keep-alive response"""
    return JSONResponse(
        content={"status": "pong", "timestamp": datetime.datetime.now().isoformat()},
        headers={"Cache-Control": "no-cache"},
    )
