"""
Logging entry point for application code.

Routes, services and stores import their logging helpers from here rather
than from ``utils`` directly.
"""

from utils.log_context import register_request_logging
from utils.logger import get_logger, hash_ip, should_sample
from utils.logging_config import SAMPLING_RATES, configure_logging, setup_logging

__all__ = [
    "get_logger",
    "hash_ip",
    "should_sample",
    "register_request_logging",
    "SAMPLING_RATES",
    "configure_logging",
    "setup_logging",
]
