"""structlog setup shared by the API process and scripts.

Every record, whether it comes from structlog or from a stdlib logger such as
uvicorn's, goes through the same processor chain and renderer: JSON lines in
production, ConsoleRenderer when ``debug`` is on.
"""

import logging
import logging.config

import structlog
from asgi_correlation_id.context import correlation_id

from taskboard.core.config import Settings

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite")


def add_correlation_id(logger, method, event_dict):
    """Copy the request's X-Request-ID into the event, when inside a request."""
    cid = correlation_id.get(None)
    if cid:
        event_dict["correlation_id"] = cid
    return event_dict


def service_tagger(service: str):
    """Processor stamping every event with the service name."""

    def add_service(logger, method, event_dict):
        event_dict.setdefault("service", service)
        return event_dict

    return add_service


def _dict_config(formatter: dict, log_level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"structured": formatter},
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "structured",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {"handlers": ["default"], "level": log_level},
        "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
    }


def configure_structlog(settings: Settings) -> None:
    """Configure structlog and bridge the stdlib root logger onto it.

    Call before other taskboard modules log anything: loggers cache their
    processor chain on first use.
    """
    log_level = settings.log_level.upper()
    if settings.debug:
        log_level = "DEBUG"

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_correlation_id,
        service_tagger(settings.app_name.lower()),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    renderer = structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer()

    logging.config.dictConfig(
        _dict_config(
            {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    renderer,
                ],
                "foreign_pre_chain": shared_processors,
            },
            log_level,
        )
    )

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
