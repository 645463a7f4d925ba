# tests/test_daemon_main.py

from __future__ import annotations

import logging
from types import SimpleNamespace

import pytest

from forget_me_not.cli import main as daemon_main


def test_bind_failure_exits_and_closes_scheduler(monkeypatch: pytest.MonkeyPatch, settings: SimpleNamespace) -> None:
    settings.log_level = "debug"
    settings.daemon_addr = "127.0.0.1:0"
    levels: list[int] = []
    closed: list[bool] = []

    def refuse(*_args, **_kwargs):
        raise OSError("address already in use")

    monkeypatch.setattr(daemon_main, "get_settings", lambda: settings)
    monkeypatch.setattr(daemon_main, "setup_logging", lambda **kw: levels.append(kw["console_level"]))
    monkeypatch.setattr(
        daemon_main,
        "create_initial_state",
        lambda **_kw: SimpleNamespace(scheduler=SimpleNamespace(close=lambda: closed.append(True))),
    )
    monkeypatch.setattr(daemon_main, "DaemonServer", refuse)

    with pytest.raises(SystemExit) as exc:
        daemon_main.main()

    assert exc.value.code == 1
    assert levels == [logging.DEBUG]
    assert closed == [True]
