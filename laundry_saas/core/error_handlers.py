# laundry_saas/core/error_handlers.py

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from laundry_saas.constants.error_codes import ErrorCode
from laundry_saas.core.exceptions import AppException
from laundry_saas.utils.response import error_response

logger = logging.getLogger(__name__)

STATUS_ERROR_CODES = {
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.PERMISSION_DENIED,
    404: ErrorCode.NOT_FOUND,
    405: ErrorCode.VALIDATION_ERROR,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.VALIDATION_ERROR,
}


def _reply(status_code: int, message, error_code: str, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response(str(message), error_code, details),
    )


async def app_exception_handler(request: Request, exc: AppException):
    if exc.status_code >= 500:
        logger.error(
            "Application error",
            extra={"path": request.url.path, "error_code": exc.error_code},
        )
    return _reply(exc.status_code, exc.detail, exc.error_code, exc.details)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _reply(
        422,
        "Invalid request data",
        ErrorCode.VALIDATION_ERROR,
        jsonable_encoder(exc.errors()),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    error_code = STATUS_ERROR_CODES.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
    return _reply(exc.status_code, exc.detail, error_code)


async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning(
        "Integrity error",
        extra={"path": request.url.path, "reason": str(exc.orig)},
    )
    return _reply(409, "Database constraint violation", ErrorCode.CONFLICT)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled exception",
        extra={"path": request.url.path, "method": request.method},
    )
    return _reply(500, "Something went wrong. Please try again.", ErrorCode.INTERNAL_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    # AppException subclasses HTTPException, so it must be registered first
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
