"""
Visit event models.

SanitizedEvent is the allow-listed projection of the client beacon body.
StoredEvent adds the server-observed fields and is what lands in the event
store, serialized from the model (camelCase keys, unset keys omitted).

RateLimitRecord is the per-IP counter stored under ``rateLimit:<ip>``.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

Number = Union[int, float]


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class ConnectionInfo(_CamelModel):
    downlink: Optional[Number] = None
    effective_type: Optional[str] = None
    rtt: Optional[Number] = None


class ScreenInfo(_CamelModel):
    height: Optional[Number] = None
    orientation: Optional[str] = None
    pixel_ratio: Optional[Number] = None
    width: Optional[Number] = None


class SanitizedEvent(_CamelModel):
    """Beacon fields that survived the allow-list."""

    connection: Optional[ConnectionInfo] = None
    screen: Optional[ScreenInfo] = None

    cpu_cores: Optional[Number] = None
    device_memory: Optional[Number] = None
    do_not_track: Optional[str] = None
    hash: Optional[str] = None
    is_bot: Optional[bool] = None
    language: Optional[str] = None
    pathname: Optional[str] = None
    referrer: Optional[str] = None
    search: Optional[str] = None
    session_id: Optional[str] = None
    time_zone: Optional[str] = None
    timestamp: Optional[str] = None
    title: Optional[str] = None
    url: Optional[str] = None
    user_agent: Optional[str] = None
    visibility: Optional[str] = None


class StoredEvent(SanitizedEvent):
    """SanitizedEvent plus server-assigned fields."""

    timestamp: str
    ip: str
    country: str
    ua: Optional[str] = None

    @classmethod
    def compose(
        cls,
        sanitized: SanitizedEvent,
        *,
        timestamp: str,
        ip: str,
        country: str,
        ua: Optional[str],
    ) -> "StoredEvent":
        """Merge *sanitized* with server fields; server values always win."""
        data = sanitized.model_dump(exclude_unset=True)
        data.update(timestamp=timestamp, ip=ip, country=country, ua=ua)
        return cls.model_validate(data)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_unset=True)


class RateLimitRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")

    count: int
    timestamp: int  # epoch ms of the last write
