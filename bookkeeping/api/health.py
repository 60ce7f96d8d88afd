"""
Health check endpoint.

Used by load balancers, monitoring systems, and humans
to verify the application is running and responsive.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bookkeeping.config import get_settings
from bookkeeping.models.base import get_db

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Return application health status including database connectivity.

    A failing SELECT 1 reports the instance as degraded rather
    than raising, so monitors always get a response body.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError:
        db_status = "unhealthy"

    settings = get_settings()
    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "service": "bookkeeping-core",
        "version": settings.APP_VERSION,
        "database": db_status,
    }
