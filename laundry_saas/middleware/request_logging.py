# laundry_saas/middleware/request_logging.py

import time
import logging
from fastapi import Request

logger = logging.getLogger("access")


async def request_logging_middleware(request: Request, call_next):
    started = time.perf_counter()

    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.error(
            "",
            extra={
                "client_addr": request.client.host if request.client else "unknown",
                "method": request.method,
                "path": request.url.path,
                "status_code": 500,
                "process_time_ms": elapsed_ms,
            },
        )
        raise

    elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
    response.headers["X-Process-Time-Ms"] = str(elapsed_ms)

    logger.info(
        "",
        extra={
            "client_addr": request.client.host if request.client else "unknown",
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time_ms": elapsed_ms,
        },
    )

    return response
