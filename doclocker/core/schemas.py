from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Единый формат ответа API"""
    success: bool = True
    message: str = ""
    data: Optional[T] = None


class ApiListResponse(ApiResponse[T], Generic[T]):
    count: int = 0
