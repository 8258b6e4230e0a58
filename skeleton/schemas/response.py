from typing import Generic, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class Meta(BaseModel):
    total: int
    limit: int
    offset: int


class APIResponse(BaseModel, Generic[T]):
    """Uniform envelope. Unset parts are left out when dumped with exclude_none."""
    data: Optional[T] = None
    meta: Optional[Meta] = None
    error: Optional[str] = None


class Offset(BaseModel):
    limit: int = 20
    offset: int = 0
