"""Health route — reports whether the database answers."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from otp_auth.database.engine import get_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request, session: AsyncSession = Depends(get_session)):
    """Ping the database with ``SELECT 1`` and report ``up`` / ``down``."""
    app_name = request.app.state.settings.app_name
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("Database health check failed: %s", exc)
        return JSONResponse(
            status_code=503,
            content={"status": "down", "error": f"db down: {exc}", "app": app_name},
        )
    return {"status": "up", "message": "It's healthy", "app": app_name}
