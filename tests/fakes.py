# tests/fakes.py

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from forget_me_not.errors import NotifyError, SchedulerUnavailable
from forget_me_not.tasks.task_models import Task


@dataclass(slots=True)
class Notification:
    summary: str
    body: str
    image: str | None
    sound: str | None


class FakeNotifier:
    """
    Recording Notifier for scheduler tests.

    - Thread-safe: the scheduler calls it from its own thread
    - fail_on holds 1-based call numbers that raise NotifyError (the call is
      still recorded)
    """

    def __init__(self, fail_on: set[int] | None = None) -> None:
        self.fail_on = set(fail_on or ())
        self._lock = threading.Lock()
        self._calls: list[Notification] = []

    def notify(
        self,
        summary: str,
        body: str,
        image: str | None = None,
        sound: str | None = None,
    ) -> None:
        with self._lock:
            self._calls.append(Notification(summary, body, image, sound))
            n = len(self._calls)
        if n in self.fail_on:
            raise NotifyError(f"simulated failure on call {n}")

    @property
    def calls(self) -> list[Notification]:
        with self._lock:
            return list(self._calls)

    @property
    def bodies(self) -> list[str]:
        return [c.body for c in self.calls]


class BlockingNotifier(FakeNotifier):
    """FakeNotifier whose calls hold the scheduler loop until release is set."""

    def __init__(self) -> None:
        super().__init__()
        self.entered = threading.Event()
        self.release = threading.Event()

    def notify(
        self,
        summary: str,
        body: str,
        image: str | None = None,
        sound: str | None = None,
    ) -> None:
        self.entered.set()
        self.release.wait(timeout=5.0)
        super().notify(summary, body, image, sound)


@dataclass(slots=True)
class FakeScheduler:
    """TaskScheduler that only records what it was asked to do."""

    added: list[Task] = field(default_factory=list)
    cancelled: list[Task] = field(default_factory=list)
    unavailable: bool = False

    def add_task(self, task: Task) -> None:
        if self.unavailable:
            raise SchedulerUnavailable("fake scheduler is down")
        self.added.append(task)

    def cancel_task(self, task: Task) -> None:
        if self.unavailable:
            raise SchedulerUnavailable("fake scheduler is down")
        self.cancelled.append(task)


class FinishedLog:
    """Collects task ids reported through the scheduler's on_finished hook."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.ids: list[str] = []

    def __call__(self, task: Task) -> None:
        with self._lock:
            self.ids.append(task.task_id)

    def __contains__(self, task_id: object) -> bool:
        with self._lock:
            return task_id in self.ids


def wait_until(predicate: Callable[[], bool], timeout: float = 3.0, interval: float = 0.01) -> bool:
    """Poll predicate until it holds or timeout expires; returns the last result."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()
