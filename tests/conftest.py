# tests/conftest.py

from __future__ import annotations

from collections.abc import Iterator
from datetime import timezone
from pathlib import Path
from types import SimpleNamespace

import pytest

from forget_me_not.core.state import AppState
from forget_me_not.tasks.task_registry import TaskRegistry
from forget_me_not.tasks.task_scheduler import Scheduler

from .fakes import FakeNotifier, FakeScheduler, FinishedLog


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the caller's environment.
    """
    return SimpleNamespace(
        app_name="fmn-test",
        log_level="DEBUG",
        data_dir=tmp_path / "fmn",
        daemon_host="127.0.0.1",
        daemon_port=0,
        connect_timeout=2.0,
        command_capacity=8,
        image_path=None,
        sound_path=None,
        notify_timeout=1,
    )


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def finished() -> FinishedLog:
    return FinishedLog()


@pytest.fixture()
def scheduler(notifier: FakeNotifier, finished: FinishedLog) -> Iterator[Scheduler]:
    """Real scheduler thread wired to the fake notifier; UTC as the local offset."""
    s = Scheduler(notifier, summary="fmn-test", on_finished=finished, offset=timezone.utc)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def fake_scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture()
def state(settings: SimpleNamespace, notifier: FakeNotifier, fake_scheduler: FakeScheduler) -> AppState:
    """AppState with a recording scheduler and a real listing registry."""
    return AppState(
        settings=settings,
        scheduler=fake_scheduler,
        registry=TaskRegistry(),
    )
