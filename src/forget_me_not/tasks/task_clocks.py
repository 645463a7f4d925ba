# src/forget_me_not/tasks/task_clocks.py

from __future__ import annotations

"""
Per-task clocks.

Each live reminder is one coroutine running on the scheduler loop. A clock
only ever suspends in `race`: its stop signal against a sleep. Stopping is
therefore cooperative; a clock notices the signal at its next race.

- once_clock:   one race, at most one fire
- period_clock: race every period until stopped
- daily_clock:  race until the next HH:MM occurrence, fire, re-arm for the next day

A NotifyError ends recurring clocks for good: the clock stops itself and the
next race observes that immediately. There is no retry.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from ..core.ports import Notifier
from ..core.timeparse import utc_now
from ..errors import NotifyError, SignalClosed
from .task_models import Once, OncePerDay, Period, Task

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class StopSignal:
    """
    One-shot stop message between the coordinator and a single clock.

    The clock closes the signal when it finishes; sending after that raises
    SignalClosed so the sender can tell a stop from a no-op.
    """

    __slots__ = ("_event", "_closed")

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self) -> None:
        if self._closed:
            raise SignalClosed("clock already finished")
        self._event.set()

    async def recv(self) -> None:
        await self._event.wait()

    def close(self) -> None:
        self._closed = True


async def race(delay: float, stop: StopSignal, on_wake: Callable[[], None]) -> bool:
    """
    Wait for whichever comes first: the stop signal or `delay` seconds.

    Returns False when stopped. On timeout calls on_wake() and returns True.
    """
    try:
        await asyncio.wait_for(stop.recv(), timeout=max(0.0, delay))
    except asyncio.TimeoutError:
        on_wake()
        return True
    return False


def _deliver(task: Task, notifier: Notifier, summary: str) -> bool:
    try:
        notifier.notify(summary, task.description, task.image, task.sound)
    except NotifyError:
        logger.exception("Failed to deliver notification for task %s", task.task_id)
        return False
    return True


def _fire_and_escalate(task: Task, notifier: Notifier, summary: str, stop: StopSignal) -> None:
    """Deliver; on failure stop this clock (the next race sees it)."""
    if not _deliver(task, notifier, summary):
        logger.error("Task %s stops after a delivery failure", task.task_id)
        stop.send()


async def once_clock(
        task: Task,
        rule: Once,
        stop: StopSignal,
        notifier: Notifier,
        *,
        summary: str,
        now: Clock = utc_now,
) -> None:
    try:
        delay = (rule.fire_at - now()).total_seconds()
        if delay <= 0:
            logger.warning(
                "Task %s: fire time %s is in the past; it will not fire",
                task.task_id,
                rule.fire_at.isoformat(),
            )
            return

        def on_wake() -> None:
            logger.info("Task %s fires (%s): %s", task.task_id, rule.describe(), task.description)
            _deliver(task, notifier, summary)

        if not await race(delay, stop, on_wake):
            logger.info("Task %s (%s) cancelled", task.task_id, rule.describe())
    finally:
        stop.close()


async def period_clock(
        task: Task,
        rule: Period,
        stop: StopSignal,
        notifier: Notifier,
        *,
        summary: str,
) -> None:
    period_s = rule.every.total_seconds()

    def on_wake() -> None:
        logger.info("Task %s fires (%s): %s", task.task_id, rule.describe(), task.description)
        _fire_and_escalate(task, notifier, summary, stop)

    try:
        while await race(period_s, stop, on_wake):
            pass
        logger.info("Task %s (%s) stopped", task.task_id, rule.describe())
    finally:
        stop.close()


def next_daily_occurrence(now: datetime, hour: int, minute: int) -> datetime:
    """
    First instant strictly after `now` whose wall clock reads hour:minute:00.

    `now` carries the fixed offset; day rollover goes through timedelta so
    month/year boundaries are handled.
    """
    candidate = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


async def daily_clock(
        task: Task,
        rule: OncePerDay,
        stop: StopSignal,
        notifier: Notifier,
        *,
        summary: str,
        offset: timezone,
        now: Clock = utc_now,
) -> None:
    def on_wake() -> None:
        logger.info("Task %s fires (%s): %s", task.task_id, rule.describe(), task.description)
        _fire_and_escalate(task, notifier, summary, stop)

    try:
        target = next_daily_occurrence(now().astimezone(offset), rule.hour, rule.minute)
        while True:
            logger.debug("Task %s next fire at %s", task.task_id, target.isoformat())
            delay = (target - now()).total_seconds()
            if not await race(delay, stop, on_wake):
                break
            # Re-arm from the fired target at the earliest so an early wakeup
            # cannot yield the same day twice.
            current = max(now().astimezone(offset), target)
            target = next_daily_occurrence(current, rule.hour, rule.minute)
        logger.info("Task %s (%s) stopped", task.task_id, rule.describe())
    finally:
        stop.close()
