import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from skeleton.api.helpers import format_duration
from skeleton.repo import Repository
from skeleton.schemas.health import DatabaseHealth

logger = logging.getLogger(__name__)

START_TIME = time.monotonic_ns()

router = APIRouter(tags=["health"])


def get_repo(request: Request) -> Repository:
    return request.app.state.repo


@router.get(
    "/databasez",
    response_model=DatabaseHealth,
    summary="Database Health check",
    description="Check the Database health status",
    responses={503: {"model": DatabaseHealth, "description": "Database unreachable"}},
)
async def database_health(repo: Repository = Depends(get_repo)):
    db_status = "healthy"
    try:
        await repo.ping()
    except Exception as e:
        logger.warning(f"database ping failed: {e}")
        db_status = "unhealthy"

    uptime = format_duration(time.monotonic_ns() - START_TIME)

    response = DatabaseHealth(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        database=db_status,
        uptime=uptime,
    )

    # overall status only follows the database in this branch
    if db_status == "unhealthy":
        response.status = "degraded"
        return JSONResponse(status_code=503, content=response.model_dump(mode="json"))

    return response
