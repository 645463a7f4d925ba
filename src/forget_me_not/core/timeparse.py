# src/forget_me_not/core/timeparse.py

"""
Time helpers shared by the client and the daemon.

The local UTC offset is captured once per process and reused; the scheduler
never re-resolves it.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

DURATION_RE = re.compile(
    r"^(?:(?P<day>\d+)d)?(?:(?P<hour>\d+)h)?(?:(?P<minute>\d+)m)?(?:(?P<second>\d+)s)?$"
)
AT_RE = re.compile(r"^\s*(?P<hour>\d{1,2}):(?P<minute>\d{1,2})(?::\d{1,2})?\s*$")

_LOCAL_OFFSET: timezone | None = None


def local_offset() -> timezone:
    """Fixed local offset, captured on first use."""
    global _LOCAL_OFFSET
    if _LOCAL_OFFSET is None:
        offset = datetime.now().astimezone().utcoffset() or timedelta(0)
        _LOCAL_OFFSET = timezone(offset)
        logger.debug("Captured local UTC offset: %s", _LOCAL_OFFSET)
    return _LOCAL_OFFSET


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def local_now() -> datetime:
    return utc_now().astimezone(local_offset())


def parse_duration(raw: str) -> timedelta:
    """
    Parse "1d1h1m1s"-style durations. Every component is optional but the
    order is fixed: days, hours, minutes, seconds.
    """
    m = DURATION_RE.match((raw or "").strip())
    if m is None:
        raise ConfigurationError(
            f"invalid duration {raw!r}; valid examples: 1d1h1m1s, 2h, 30s, 55m"
        )
    parts = {k: int(v) if v else 0 for k, v in m.groupdict().items()}
    try:
        return timedelta(
            days=parts["day"],
            hours=parts["hour"],
            minutes=parts["minute"],
            seconds=parts["second"],
        )
    except OverflowError as e:
        raise ConfigurationError(f"duration {raw!r} is too large") from e


def parse_positive_duration(raw: str) -> timedelta:
    """parse_duration that rejects an empty/zero result."""
    duration = parse_duration(raw)
    if duration <= timedelta(0):
        raise ConfigurationError(f"duration {raw!r} must be greater than zero")
    return duration


def parse_hour_minute(raw: str) -> tuple[int, int]:
    m = AT_RE.match(raw or "")
    if m is None:
        raise ConfigurationError(f"invalid time {raw!r}; correct examples: 13:11, 23:01")
    hour, minute = int(m.group("hour")), int(m.group("minute"))
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ConfigurationError(f"time {raw!r} is out of range")
    return hour, minute


def parse_at(raw: str, *, now: datetime | None = None) -> datetime:
    """
    Next local instant at HH:MM.

    Today if that moment is still ahead, otherwise the same time tomorrow.
    """
    hour, minute = parse_hour_minute(raw)
    now = now or local_now()
    fire_at = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if fire_at <= now:
        logger.info("%02d:%02d already passed today; scheduling it tomorrow", hour, minute)
        fire_at += timedelta(days=1)
    return fire_at
