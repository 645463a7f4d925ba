# src/forget_me_not/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from .ports import TaskRepo, TaskScheduler


@dataclass
class AppState:
    """Everything a daemon request handler needs, wired once in bootstrap."""

    # Store Settings on the state for easy access in other modules later.
    settings: object

    scheduler: TaskScheduler
    registry: TaskRepo
