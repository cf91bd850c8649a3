from __future__ import annotations

import datetime as dt
import os
from functools import lru_cache
from zoneinfo import ZoneInfo

UTC = dt.timezone.utc


def utcnow() -> dt.datetime:
    return dt.datetime.now(UTC)


def iso_timestamp(value: dt.datetime | None = None) -> str:
    """UTC timestamp with millisecond precision and a trailing "Z", e.g. 2024-05-01T09:30:00.123Z."""
    v = (value or utcnow()).astimezone(UTC)
    return v.strftime("%Y-%m-%dT%H:%M:%S.") + f"{v.microsecond // 1000:03d}Z"


@lru_cache(maxsize=32)
def _zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def ui_timezone_name() -> str:
    return os.environ.get("UI_TIMEZONE", "America/New_York").strip() or "America/New_York"


def local_today(tz_name: str | None = None) -> dt.date:
    return utcnow().astimezone(_zone(tz_name or ui_timezone_name())).date()
