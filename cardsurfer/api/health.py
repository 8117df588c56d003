"""
Health check endpoint.

Reports healthy only if the database answers.
"""

import logging
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cardsurfer.db.database import get_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: str | None = None
    error: str | None = None


@router.get(
    "/health",
    response_model=HealthResponse,
    response_model_exclude_none=True,
    responses={500: {"model": HealthResponse}},
)
async def health(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HealthResponse:
    """
    Health check with database connectivity check.

    Returns 500 with the error if the database is unavailable.
    """
    try:
        await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.error("Health check failed: %s", e)
        response.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        return HealthResponse(status="unhealthy", error=str(e))

    return HealthResponse(status="healthy", timestamp=datetime.now(UTC).isoformat())
