# src/forget_me_not/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the scheduler and the daemon.

The core depends on Protocols instead of concrete implementations.
This keeps the notification backend swappable and makes testing easier.
"""

from typing import Protocol

from ..tasks.task_models import Task


class Notifier(Protocol):
    """
    Delivers one reminder.

    Must raise NotifyError when delivery fails; the scheduler reacts to that
    (recurring reminders stop for good). Called from the scheduler thread.
    """

    def notify(
            self,
            summary: str,
            body: str,
            image: str | None = None,
            sound: str | None = None,
    ) -> None: ...


class TaskScheduler(Protocol):
    def add_task(self, task: Task) -> None: ...
    def cancel_task(self, task: Task) -> None: ...


class TaskRepo(Protocol):
    """Listing registry: what the daemon shows for `fmn list`."""

    def add(self, task: Task) -> None: ...
    def get(self, task_id: str) -> Task | None: ...
    def remove(self, task_id: str) -> Task | None: ...
    def list_tasks(self) -> list[Task]: ...
