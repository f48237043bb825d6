"""
structlog setup for the visit tracker.

Every log line is one event: JSON in production, coloured console output in
development (``LOG_FORMAT`` overrides either). Before rendering, each event
passes through two scrubbing processors:

- ``mask_client_ips`` replaces visitor addresses under the keys in
  ``IP_FIELDS`` with a short SHA-256 digest when running in production.
- ``redact_sensitive_fields`` blanks credentials such as DSNs, Redis URIs and
  auth headers.

``setup_logging()`` runs once when this module is first imported, using the
environment-backed ``AppSettings``.
"""

import hashlib
import logging
import sys
from typing import Optional

import structlog
from structlog.types import EventDict, Processor

from config import AppSettings, LoggingSettings

# Set by configure_logging(); addresses are only hashed in production
IS_PRODUCTION = False

IP_FIELDS = frozenset({"ip", "client_ip"})

REDACTED_FIELDS = frozenset(
    {
        "authorization",
        "cookie",
        "sentry_dsn",
        "redis_uri",
        "rate_limit_redis_uri",
        "events_redis_uri",
    }
)
REDACTED = "***REDACTED***"

# Per-event sampling for high-volume success logs; unknown events are kept
SAMPLING_RATES: dict[str, float] = {
    "visit_tracked": 0.10,
}


def hash_ip(ip_address: Optional[str]) -> Optional[str]:
    """SHA-256 prefix of *ip_address* in production, unchanged otherwise."""
    if IS_PRODUCTION and ip_address:
        return hashlib.sha256(ip_address.encode()).hexdigest()[:16]
    return ip_address


def mask_client_ips(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    for key in IP_FIELDS & event_dict.keys():
        event_dict[key] = hash_ip(event_dict[key])
    return event_dict


def redact_sensitive_fields(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    for key in REDACTED_FIELDS & event_dict.keys():
        event_dict[key] = REDACTED
    return event_dict


def configure_logging(settings: LoggingSettings, *, production: bool) -> None:
    """Configure stdlib logging and structlog from *settings*."""
    global IS_PRODUCTION
    IS_PRODUCTION = production
    SAMPLING_RATES["visit_tracked"] = settings.sample_rate_tracked

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )
    # uvicorn's access log duplicates request_completed
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("redis").setLevel(logging.WARNING)

    log_format = settings.log_format or ("json" if production else "console")
    if log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True, pad_event=15, sort_keys=False
        )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            mask_client_ips,
            redact_sensitive_fields,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def setup_logging(settings: Optional[AppSettings] = None) -> None:
    if settings is None:
        settings = AppSettings()
    configure_logging(settings.logging, production=settings.is_production)

    structlog.get_logger(__name__).info(
        "logging_initialized",
        env=settings.env,
        log_level=settings.logging.log_level,
        sentry_enabled=bool(settings.sentry.sentry_dsn),
    )


setup_logging()
