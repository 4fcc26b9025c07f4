# laundry_saas/core/db.py

import ssl
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool

from laundry_saas.core.config import (
    DATABASE_URL,
    DB_TYPE,
    DB_POOL_SIZE,
    DB_MAX_OVERFLOW,
    DB_POOL_TIMEOUT,
    DB_SSL_VERIFY,
    DB_ECHO_POOL,
    APP_ENV,
)

Base = declarative_base()


# =====================================================
# ENGINE OPTIONS PER BACKEND
# =====================================================
def _postgres_options() -> dict:
    ssl_ctx = ssl.create_default_context()
    if not DB_SSL_VERIFY:
        ssl_ctx.check_hostname = False
        ssl_ctx.verify_mode = ssl.CERT_NONE

    return {
        "connect_args": {
            "ssl": ssl_ctx,
            # pgbouncer in transaction mode cannot keep prepared statements
            "statement_cache_size": 0,
            "prepared_statement_cache_size": 0,
        },
        "pool_size": DB_POOL_SIZE,
        "max_overflow": DB_MAX_OVERFLOW,
        "pool_timeout": DB_POOL_TIMEOUT,
        "pool_pre_ping": True,
    }


def _sqlite_options() -> dict:
    return {
        "connect_args": {"check_same_thread": False},
        # aiosqlite connections are bound to the loop that opened them
        "poolclass": NullPool,
    }


ENGINE_OPTIONS = {
    "postgres": _postgres_options,
    "sqlite": _sqlite_options,
}

engine = create_async_engine(
    DATABASE_URL,
    echo=False,
    echo_pool=DB_ECHO_POOL,
    **ENGINE_OPTIONS[DB_TYPE](),
)

if DB_TYPE == "sqlite":
    @event.listens_for(engine.sync_engine, "connect")
    def enable_sqlite_foreign_keys(dbapi_connection, _):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# =====================================================
# SESSIONS
# =====================================================
AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autoflush=False,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session for FastAPI dependencies."""
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Session for work outside a request (scheduled jobs, scripts); rolls back on error."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


# every model must be registered on Base before create_all
import laundry_saas.models  # noqa


# =====================================================
# DEV ONLY: SCHEMA MANAGEMENT
# =====================================================
def _require_development(action: str):
    if APP_ENV != "development":
        raise RuntimeError(f"{action} is forbidden outside development")


async def init_models():
    _require_development("init_models()")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_models():
    _require_development("drop_models()")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
