# src/forget_me_not/tasks/task_models.py

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Union

from ..errors import ConfigurationError

DISPLAY_FORMAT = "%Y-%m-%d %H:%M"


@dataclass(slots=True, frozen=True)
class Once:
    """Fire exactly once at an absolute, timezone-aware instant."""

    fire_at: datetime

    def __post_init__(self) -> None:
        if self.fire_at.tzinfo is None or self.fire_at.utcoffset() is None:
            raise ConfigurationError("Once.fire_at must be timezone-aware")

    def describe(self) -> str:
        return f"at {self.fire_at.strftime(DISPLAY_FORMAT)}"


@dataclass(slots=True, frozen=True)
class Period:
    """Fire every `every`, forever, until cancelled."""

    every: timedelta

    def __post_init__(self) -> None:
        if self.every <= timedelta(0):
            raise ConfigurationError("Period must be greater than zero")

    def describe(self) -> str:
        return f"every {int(self.every.total_seconds())} secs"


@dataclass(slots=True, frozen=True)
class OncePerDay:
    """Fire once per day at hour:minute in the fixed local offset."""

    hour: int
    minute: int

    def __post_init__(self) -> None:
        if not (0 <= self.hour <= 23):
            raise ConfigurationError(f"hour out of range: {self.hour}")
        if not (0 <= self.minute <= 59):
            raise ConfigurationError(f"minute out of range: {self.minute}")

    def describe(self) -> str:
        return f"at {self.hour:02d}:{self.minute:02d} every day"


ClockType = Union[Once, Period, OncePerDay]


def new_task_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True, frozen=True)
class Task:
    task_id: str
    description: str
    clock: ClockType
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    image: str | None = None
    sound: str | None = None


def new_task(
    description: str,
    clock: ClockType,
    *,
    image: str | None = None,
    sound: str | None = None,
) -> Task:
    """Create a Task with a fresh identifier."""
    return Task(
        task_id=new_task_id(),
        description=description,
        clock=clock,
        image=image,
        sound=sound,
    )
