# laundry_saas/core/config.py

import os
from dotenv import load_dotenv
from laundry_saas.utils.logger import get_logger

logger = get_logger(__name__)

load_dotenv()


def _choice(name: str, allowed: set[str], default: str | None = None) -> str:
    value = os.getenv(name, default)
    if value not in allowed:
        raise ValueError(f"{name} must be {' | '.join(sorted(allowed))}")
    return value


def _required(name: str, reason: str = "") -> str:
    value = os.getenv(name)
    if not value:
        raise ValueError(f"{name} must be set{reason}")
    return value


def _int(name: str, default: int) -> int:
    return int(os.getenv(name, default))


def _flag(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(default)).strip().lower() in {"1", "true", "yes"}


# =====================================================
# APPLICATION
# =====================================================
APP_ENV = _choice("APP_ENV", {"development", "staging", "production"})
IS_PRODUCTION = APP_ENV == "production"

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if APP_ENV == "development" else "INFO").upper()

# =====================================================
# DATABASE
# =====================================================
DB_TYPE = _choice("DB_TYPE", {"postgres", "sqlite"})

if DB_TYPE == "postgres":
    DATABASE_URL = _required("DATABASE_URL", " for Postgres")
else:
    if IS_PRODUCTION:
        raise ValueError("SQLite is not allowed in production")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./laundry.db")
    if not DATABASE_URL.startswith("sqlite+aiosqlite://"):
        raise ValueError("DATABASE_URL must use sqlite+aiosqlite when DB_TYPE=sqlite")

DB_POOL_SIZE = _int("DB_POOL_SIZE", 10)
DB_MAX_OVERFLOW = _int("DB_MAX_OVERFLOW", 20)
DB_POOL_TIMEOUT = _int("DB_POOL_TIMEOUT", 30)
DB_ECHO_POOL = _flag("DB_ECHO_POOL")

DB_SSL_VERIFY = _flag("DB_SSL_VERIFY", True)
if IS_PRODUCTION and not DB_SSL_VERIFY:
    logger.warning("Production database connection without certificate verification")

# =====================================================
# JWT / AUTH
# =====================================================
JWT_ACCESS_SECRET_KEY = _required("JWT_ACCESS_SECRET_KEY")
JWT_ALGORITHM = "HS256"

# customers get short sessions, tenancy staff and superadmins longer ones
ACCESS_TOKEN_EXPIRE_MINUTES = _int("ACCESS_TOKEN_EXPIRE_MINUTES", 15)
ADMIN_ACCESS_TOKEN_EXPIRE_MINUTES = _int("ADMIN_ACCESS_TOKEN_EXPIRE_MINUTES", 60)

# =====================================================
# PROMOTIONS
# =====================================================
# Service assumed for a candidate order that does not name one
DEFAULT_SERVICE_TYPE = os.getenv("DEFAULT_SERVICE_TYPE", "wash_fold")

# Default wallet credit granted by a WALLET_CREDIT campaign promotion
DEFAULT_WALLET_CREDIT = os.getenv("DEFAULT_WALLET_CREDIT", "10")

# Default points granted by a LOYALTY_POINTS campaign promotion
DEFAULT_LOYALTY_POINTS = _int("DEFAULT_LOYALTY_POINTS", 100)

# Zone used for promotion windows, time-of-day and weekday conditions
PROMOTIONS_TIMEZONE = os.getenv("PROMOTIONS_TIMEZONE", "UTC")

# =====================================================
# SCHEDULER
# =====================================================
ENABLE_SCHEDULER = _flag("ENABLE_SCHEDULER")

# =====================================================
# HTTP
# =====================================================
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]
