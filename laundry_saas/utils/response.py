# laundry_saas/utils/response.py

import math
from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    success: bool = True
    message: str
    data: Optional[T] = None


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error_code: str
    details: Optional[Any] = None


def success_response(message: str, data: Optional[T] = None) -> Dict[str, Any]:
    return {"success": True, "message": message, "data": data}


def error_response(message: str, error_code: str, details: Any = None) -> Dict[str, Any]:
    code = getattr(error_code, "value", error_code)
    return ErrorResponse(message=message, error_code=code, details=details).model_dump(mode="json")


def page_count(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if total else 0
