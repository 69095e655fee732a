import logging
import logging.config
import sys
from typing import Any, Dict, List

import sentry_sdk
import structlog

from medtrack.core.config import settings

# Third-party loggers that get their own level instead of inheriting the root one.
_LIBRARY_LOG_LEVELS: Dict[str, str] = {
    "uvicorn": "INFO",
    "uvicorn.error": "INFO",
    "uvicorn.access": "INFO",
    "pymongo": "WARNING",
}


def _is_dev() -> bool:
    return settings.ENVIRONMENT in ["local", "dev"]


def _init_sentry() -> None:
    if not settings.SENTRY_DSN:
        return
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT or None,
        traces_sample_rate=1.0 if settings.ENVIRONMENT == "local" else 0.1,
        send_default_pii=False,
    )


def _renderer() -> structlog.types.Processor:
    if _is_dev():
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def setup_logging() -> None:
    """
    Configure structlog and route stdlib logging through it.

    Dev environments get a colored console renderer; everything else emits one
    JSON object per line. Sentry is initialised when ``SENTRY_DSN`` is set.
    """
    _init_sentry()

    pre_chain: List[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if not _is_dev():
        pre_chain.append(structlog.processors.dict_tracebacks)

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler_names = ["stdout"]
    loggers: Dict[str, Dict[str, Any]] = {
        "": {"handlers": handler_names, "level": settings.LOG_LEVEL, "propagate": True},
    }
    for name, level in _LIBRARY_LOG_LEVELS.items():
        loggers[name] = {"handlers": handler_names, "level": level, "propagate": False}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processor": _renderer(),
                    "foreign_pre_chain": pre_chain,
                },
            },
            "handlers": {
                "stdout": {
                    "level": settings.LOG_LEVEL,
                    "class": "logging.StreamHandler",
                    "stream": sys.stdout,
                    "formatter": "structlog",
                },
            },
            "loggers": loggers,
        }
    )
