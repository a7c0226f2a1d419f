import logging

from dependency_injector.wiring import inject, Provide
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from saveit.containers import Container
from saveit.schemas.health import HealthCheckResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthCheckResponse)
@inject
async def health_check(
    db: Session = Depends(Provide[Container.repositories.get_db]),
) -> HealthCheckResponse:
    """Health check endpoint."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {str(e)}")
        return HealthCheckResponse(status="degraded", database="unavailable")

    return HealthCheckResponse()
