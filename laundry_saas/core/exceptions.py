# laundry_saas/core/exceptions.py

from fastapi import HTTPException
from laundry_saas.constants.error_codes import ErrorCode


class AppException(HTTPException):
    """HTTP error rendered with the standard error envelope."""

    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: ErrorCode,
        details: dict | list | None = None,
    ):
        super().__init__(status_code=status_code, detail=message)
        self.error_code = error_code
        self.details = details

    def __str__(self) -> str:
        return f"{self.error_code}: {self.detail}"


class NotFoundError(AppException):
    def __init__(self, entity: str, error_code: ErrorCode = ErrorCode.NOT_FOUND):
        super().__init__(404, f"{entity} not found", error_code)


class ConflictError(AppException):
    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.CONFLICT, details=None):
        super().__init__(409, message, error_code, details)
