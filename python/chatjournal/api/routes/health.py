"""Health check endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chatjournal.api.deps import get_app_settings, get_db
from chatjournal.config import Settings
from chatjournal.db.models import utc_now
from chatjournal.errors import ApiErrorCode, ServiceUnavailableError
from chatjournal.logging import get_logger
from chatjournal.responses import success_response

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health")
def health_check(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> dict:
    """Readiness check endpoint.

    Returns 200 if the database answers a trivial query, 503 otherwise.
    The underlying database error is logged, never returned.
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("health_check_db_failed", error_type=type(e).__name__, error=str(e))
        raise ServiceUnavailableError(
            ApiErrorCode.E_SERVICE_UNAVAILABLE, "Database unavailable"
        ) from e

    return success_response(
        {
            "status": "ok",
            "timestamp": utc_now().isoformat(),
            "environment": settings.app_env.value,
            "database": "connected",
        },
        message="Server is running",
    )
