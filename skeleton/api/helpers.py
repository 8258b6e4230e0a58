from typing import Any, Optional

from fastapi import Request
from pydantic import ValidationError

from skeleton.core.exceptions import QueryBindError
from skeleton.schemas.response import APIResponse, Meta, Offset


def response(data: Any, meta: Optional[Meta] = None) -> APIResponse:
    return APIResponse(data=data, meta=meta)


def error(err: Exception) -> APIResponse:
    return APIResponse(error=str(err))


def get_offset(request: Request) -> Offset:
    """
    Read limit/offset from the query string, defaulting to 20 and 0.
    Usable directly or as a FastAPI dependency.
    """
    params = {key: request.query_params[key]
              for key in ("limit", "offset") if request.query_params.get(key)}
    try:
        return Offset(**params)
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors())
        raise QueryBindError(f"invalid query parameters: {fields}") from e


def format_duration(ns: int) -> str:
    """Render nanoseconds the way Go prints a time.Duration, e.g. 1h2m3.5s or 350ms."""
    if ns == 0:
        return "0s"
    sign = "-" if ns < 0 else ""
    ns = abs(ns)
    if ns < 1_000:
        return f"{sign}{ns}ns"
    if ns < 1_000_000:
        return f"{sign}{_fraction(ns, 1_000)}µs"
    if ns < 1_000_000_000:
        return f"{sign}{_fraction(ns, 1_000_000)}ms"

    hours, rem = divmod(ns, 3600 * 1_000_000_000)
    minutes, rem = divmod(rem, 60 * 1_000_000_000)
    out = sign
    if hours:
        out += f"{hours}h"
    if hours or minutes:
        out += f"{minutes}m"
    return out + f"{_fraction(rem, 1_000_000_000)}s"


def _fraction(value: int, unit: int) -> str:
    whole, frac = divmod(value, unit)
    if not frac:
        return str(whole)
    width = len(str(unit)) - 1
    return f"{whole}.{frac:0{width}d}".rstrip("0")
