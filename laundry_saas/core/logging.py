# laundry_saas/core/logging.py

import sys
from logging.config import dictConfig

from laundry_saas.core.config import LOG_LEVEL

DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
ACCESS_FORMAT = (
    "%(asctime)s | ACCESS | %(client_addr)s | %(method)s | "
    "%(path)s | %(status_code)s | %(process_time_ms)sms"
)

# third-party loggers that drown the promotions output at DEBUG/INFO
QUIET_LOGGERS = ("apscheduler", "sqlalchemy.engine", "aiosqlite", "passlib")


def _stdout_handler(formatter: str) -> dict:
    return {
        "class": "logging.StreamHandler",
        "stream": sys.stdout,
        "formatter": formatter,
    }


def build_logging_config(level: str = LOG_LEVEL) -> dict:
    loggers = {name: {"level": "WARNING"} for name in QUIET_LOGGERS}
    # request_logging_middleware writes here with its own line format
    loggers["access"] = {
        "handlers": ["access_console"],
        "level": "INFO",
        "propagate": False,
    }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": DEFAULT_FORMAT},
            "access": {"format": ACCESS_FORMAT},
        },
        "handlers": {
            "console": _stdout_handler("default"),
            "access_console": _stdout_handler("access"),
        },
        "loggers": loggers,
        "root": {"level": level, "handlers": ["console"]},
    }


def setup_logging(level: str = LOG_LEVEL):
    dictConfig(build_logging_config(level))
