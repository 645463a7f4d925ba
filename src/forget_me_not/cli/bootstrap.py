# src/forget_me_not/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- wires the notifier, listing registry and scheduler into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import Notifier
from ..core.state import AppState
from ..notify.desktop import DesktopNotifier
from ..tasks.task_registry import TaskRegistry
from ..tasks.task_scheduler import Scheduler

logger = logging.getLogger(__name__)


def create_initial_state(*, settings=None, notifier: Notifier | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings and the notifier injectable makes the daemon easy to test.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    if notifier is None:
        notifier = DesktopNotifier(app_name=settings.app_name, timeout=settings.notify_timeout)

    registry = TaskRegistry()
    scheduler = Scheduler(
        notifier,
        capacity=settings.command_capacity,
        summary=settings.app_name,
        on_finished=registry.forget_finished,
    )

    return AppState(
        settings=settings,
        scheduler=scheduler,
        registry=registry,
    )
