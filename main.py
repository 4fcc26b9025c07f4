# main.py
import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from laundry_saas.routers import (
    auth_router,
    activity_router,
    superadmin_tenancy_router,
    superadmin_campaign_router,
    admin_discount_router,
    admin_campaign_router,
    customer_discount_router,
    customer_campaign_router,
)

from laundry_saas.core.config import APP_ENV, CORS_ORIGINS, ENABLE_SCHEDULER
from laundry_saas.core.db import init_models
from laundry_saas.core.scheduler import scheduler
from laundry_saas.core.logging import setup_logging
from laundry_saas.core.error_handlers import register_exception_handlers
from laundry_saas.middleware.request_logging import request_logging_middleware

SERVICE_NAME = "laundry-promotions-api"
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")

ROUTERS = (
    auth_router,
    activity_router,
    superadmin_tenancy_router,
    superadmin_campaign_router,
    admin_discount_router,
    admin_campaign_router,
    customer_discount_router,
    customer_campaign_router,
)

setup_logging()
logger = logging.getLogger(__name__)


def _scheduler_enabled() -> bool:
    # production runs the lifecycle job only when opted in
    return APP_ENV != "production" or ENABLE_SCHEDULER


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting promotions service", extra={"environment": APP_ENV, "version": APP_VERSION})

    if APP_ENV == "development":
        await init_models()
        logger.info("Schema created for development database")

    if _scheduler_enabled():
        scheduler.start()
        logger.info("Promotion lifecycle scheduler started")
    else:
        logger.info("Promotion lifecycle scheduler disabled")

    yield

    if scheduler.running:
        scheduler.shutdown(wait=False)
    logger.info("Promotions service stopped")


app = FastAPI(
    title="Laundry SaaS Promotions API",
    description="Multi-tenant discount and campaign management for laundry businesses",
    version=APP_VERSION,
    docs_url="/docs" if APP_ENV != "production" else None,
    redoc_url=None,
    lifespan=lifespan,
)

register_exception_handlers(app)

app.middleware("http")(request_logging_middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", tags=["Health"])
async def health_check():
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "environment": APP_ENV,
        "version": APP_VERSION,
    }


for router in ROUTERS:
    app.include_router(router)
