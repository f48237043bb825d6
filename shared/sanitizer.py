"""
Beacon body sanitization: pure, side-effect-free functions.

The sanitizer is a closed allow-list projection: only the keys named below
are read from the untrusted body, each is type-checked, strings are
truncated, and wrong types become ``None``. Nothing else is carried over.
"""

from __future__ import annotations

import math
import re
from typing import Any, Optional, Union

from schemas.models.event import ConnectionInfo, SanitizedEvent, ScreenInfo

DEFAULT_MAX_LENGTH = 512
DEFAULT_NESTED_MAX_LENGTH = 32

FLAT_STRING_FIELDS: tuple[str, ...] = (
    "doNotTrack",
    "hash",
    "language",
    "pathname",
    "referrer",
    "search",
    "sessionId",
    "timeZone",
    "timestamp",
    "title",
    "url",
    "userAgent",
    "visibility",
)
FLAT_NUMBER_FIELDS: tuple[str, ...] = ("cpuCores", "deviceMemory")
FLAT_BOOL_FIELDS: tuple[str, ...] = ("isBot",)

# JSON allows escaped lone surrogates, which cannot be encoded as UTF-8
_LONE_SURROGATE = re.compile("[\ud800-\udfff]")
REPLACEMENT_CHARACTER = "\ufffd"


def truncate(value: Any, max_length: int = DEFAULT_MAX_LENGTH) -> Optional[str]:
    """Return *value* cut to *max_length* if it is a string, else ``None``.

    Lone surrogates become U+FFFD one-for-one, so the result is always
    UTF-8 encodable and keeps its length.
    """
    if not isinstance(value, str):
        return None
    return _LONE_SURROGATE.sub(REPLACEMENT_CHARACTER, value[:max_length])


def as_number(value: Any) -> Optional[Union[int, float]]:
    """Return *value* if it is a finite JSON number, else ``None``.

    ``bool`` is rejected even though it subclasses ``int``.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def as_bool(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


def _sanitize_connection(raw: dict, nested_max: int) -> ConnectionInfo:
    return ConnectionInfo(
        downlink=as_number(raw.get("downlink")),
        effective_type=truncate(raw.get("effectiveType"), nested_max),
        rtt=as_number(raw.get("rtt")),
    )


def _sanitize_screen(raw: dict, nested_max: int) -> ScreenInfo:
    return ScreenInfo(
        height=as_number(raw.get("height")),
        orientation=truncate(raw.get("orientation"), nested_max),
        pixel_ratio=as_number(raw.get("pixelRatio")),
        width=as_number(raw.get("width")),
    )


def sanitize_telemetry(
    data: Any,
    *,
    max_length: int = DEFAULT_MAX_LENGTH,
    nested_max_length: int = DEFAULT_NESTED_MAX_LENGTH,
) -> SanitizedEvent:
    """Project an untrusted beacon body onto :class:`SanitizedEvent`.

    Flat keys are kept only when present in *data*; ``connection`` and
    ``screen`` only when they are JSON objects. Never raises on bad input.

    Args:
        data: Parsed JSON body of unknown shape.
        max_length: Truncation length for flat string fields.
        nested_max_length: Truncation length for
            ``connection.effectiveType`` and ``screen.orientation``.

    Returns:
        The sanitized event; only the keys that were supplied are "set".
    """
    clean: dict[str, Any] = {}
    if not isinstance(data, dict):
        return SanitizedEvent()

    if isinstance(data.get("connection"), dict):
        clean["connection"] = _sanitize_connection(
            data["connection"], nested_max_length
        )
    if isinstance(data.get("screen"), dict):
        clean["screen"] = _sanitize_screen(data["screen"], nested_max_length)

    for key in FLAT_STRING_FIELDS:
        if key in data:
            clean[key] = truncate(data[key], max_length)
    for key in FLAT_NUMBER_FIELDS:
        if key in data:
            clean[key] = as_number(data[key])
    for key in FLAT_BOOL_FIELDS:
        if key in data:
            clean[key] = as_bool(data[key])

    return SanitizedEvent.model_validate(clean)
