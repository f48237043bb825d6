"""Logger factory and the sampling / IP-hashing helpers used at call sites."""

import random

import structlog
from structlog.stdlib import BoundLogger

from .logging_config import SAMPLING_RATES, hash_ip

__all__ = ["get_logger", "hash_ip", "should_sample"]


def get_logger(name: str) -> BoundLogger:
    """
    Return a structlog logger bound to *name*.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("visit_tracked", visit_key="visit:1760000000000:4f0c...")
    """
    return structlog.get_logger(name)


def should_sample(event_type: str) -> bool:
    """True if this occurrence of *event_type* should be logged.

    Rates come from ``SAMPLING_RATES``; event types without a rate are
    always logged.
    """
    rate = SAMPLING_RATES.get(event_type, 1.0)
    if rate >= 1.0:
        return True
    if rate <= 0.0:
        return False
    return random.random() < rate
