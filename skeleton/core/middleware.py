"""
Request middleware: access log in Common Log Format and panic recovery.
"""

import logging
from datetime import datetime, timezone

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from skeleton.schemas.response import APIResponse

access_logger = logging.getLogger("skeleton.access")
logger = logging.getLogger(__name__)


def common_log_line(request: Request, status_code: int, size: str, now: datetime) -> str:
    host = request.client.host if request.client else "-"
    target = request.url.path
    if request.url.query:
        target += f"?{request.url.query}"
    protocol = f"HTTP/{request.scope.get('http_version', '1.1')}"
    stamp = now.strftime("%d/%b/%Y:%H:%M:%S %z")
    return f'{host} - - [{stamp}] "{request.method} {target} {protocol}" {status_code} {size}'


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Write one Common Log Format line per request."""

    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        size = response.headers.get("content-length", "-")
        access_logger.info(common_log_line(request, response.status_code, size, datetime.now(timezone.utc)))
        return response


class RecoverMiddleware(BaseHTTPMiddleware):
    """Turn an unhandled handler exception into a 500 envelope instead of dropping the connection."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.exception(f"panic recovered: {request.method} {request.url.path}")
            body = APIResponse(error="Internal Server Error")
            return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))
