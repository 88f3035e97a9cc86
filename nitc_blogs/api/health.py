"""
NITC Blogs — Health endpoint
"""
import asyncio
from typing import Awaitable, Callable

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from nitc_blogs.db.database import Database
from nitc_blogs.schemas.common import HealthResponse

router = APIRouter(tags=["health"])


async def _ping_database(db: Database) -> None:
    async with db.engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def _probe(check: Callable[[], Awaitable[object]], timeout: float) -> str:
    try:
        await asyncio.wait_for(check(), timeout=timeout)
    except Exception as e:
        return f"error: {str(e)[:100]}"
    return "ok"


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Probe the database, and Redis when the login limiter uses it. 503 if any probe fails."""
    state = request.app.state
    settings = state.settings

    probes = {"database": lambda: _ping_database(state.db)}
    redis = getattr(state, "redis", None)
    if redis is not None:
        probes["redis"] = redis.ping

    deps = {name: await _probe(check, settings.HEALTH_CHECK_TIMEOUT) for name, check in probes.items()}
    healthy = all(result == "ok" for result in deps.values())

    body = HealthResponse(
        status="healthy" if healthy else "degraded",
        service=settings.SERVICE_NAME,
        version=settings.SERVICE_VERSION,
        dependencies=deps,
    )
    return JSONResponse(content=body.model_dump(), status_code=200 if healthy else 503)
