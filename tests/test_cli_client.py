# tests/test_cli_client.py

from __future__ import annotations

from datetime import timedelta
from types import SimpleNamespace

import pytest

from forget_me_not.cli import client
from forget_me_not.cli.client import build_parser, build_request
from forget_me_not.core.timeparse import utc_now
from forget_me_not.daemon.protocol import RequestKind
from forget_me_not.errors import ConfigurationError
from forget_me_not.tasks.task_models import Once, OncePerDay, Period


def _request(settings: SimpleNamespace, *argv: str):
    return build_request(build_parser().parse_args(list(argv)), settings)


def test_after_builds_future_once(settings: SimpleNamespace) -> None:
    before = utc_now()
    req = _request(settings, "add", "tea", "after", "3m")

    assert req.kind == RequestKind.ADD
    assert isinstance(req.clock, Once)
    assert req.clock.fire_at - before >= timedelta(minutes=3)


def test_at_per_day_builds_daily_rule(settings: SimpleNamespace) -> None:
    req = _request(settings, "add", "standup", "at", "9:05", "--per-day")
    assert req.clock == OncePerDay(9, 5)


def test_per_builds_period(settings: SimpleNamespace) -> None:
    req = _request(settings, "add", "water", "per", "1h30m")
    assert req.clock == Period(timedelta(hours=1, minutes=30))


def test_zero_durations_are_rejected(settings: SimpleNamespace) -> None:
    with pytest.raises(ConfigurationError):
        _request(settings, "add", "x", "after", "0s")
    with pytest.raises(ConfigurationError):
        _request(settings, "add", "x", "per", "0m")


def test_media_defaults_come_from_settings(settings: SimpleNamespace) -> None:
    settings.image_path = "/icons/bell.png"
    settings.sound_path = "/sounds/ding.wav"

    req = _request(settings, "add", "x", "-s", "/other.wav", "per", "5m")

    assert req.image == "/icons/bell.png"
    assert req.sound == "/other.wav"


def test_rm_and_list(settings: SimpleNamespace) -> None:
    assert _request(settings, "rm", "abc").task_id == "abc"
    assert _request(settings, "list").kind == RequestKind.SHOW


def test_after_past_the_calendar_is_rejected(settings: SimpleNamespace) -> None:
    # Fits in a timedelta, but now + duration runs past year 9999.
    with pytest.raises(ConfigurationError):
        _request(settings, "add", "x", "after", "3000000d")


def test_main_exits_with_usage_status_on_huge_duration(monkeypatch: pytest.MonkeyPatch, settings: SimpleNamespace) -> None:
    monkeypatch.setattr(client, "get_settings", lambda: settings)
    assert client.main(["add", "x", "after", "9999999999d"]) == client.EXIT_USAGE
