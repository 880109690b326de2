"""
Response envelope shared by every endpoint.
"""

from pydantic import BaseModel
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """``{"success": ..., "data": ..., "error": ...}``"""
    success: bool = True
    data: Optional[T] = None
    error: Optional[str] = None


def ok(data=None) -> dict:
    return {"success": True, "data": data, "error": None}


def fail(message: str) -> dict:
    return {"success": False, "data": None, "error": message}
