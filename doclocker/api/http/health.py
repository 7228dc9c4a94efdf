import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from sqlalchemy import text

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request):
    """Проверка состояния сервиса и базы данных"""
    database_ok = True
    try:
        async with request.app.state.database.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:
        logger.error(f"Health check database error: {exc}")
        database_ok = False

    return {
        "success": database_ok,
        "message": "Server is running" if database_ok else "Database unavailable",
        "data": {
            "database": "ok" if database_ok else "unavailable",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    }
