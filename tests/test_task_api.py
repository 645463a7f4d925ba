# tests/test_task_api.py

from __future__ import annotations

from datetime import timedelta

from forget_me_not.core.state import AppState
from forget_me_not.daemon.protocol import Request, ResponseKind
from forget_me_not.tasks.task_api import handle_request
from forget_me_not.tasks.task_models import OncePerDay, Period

from .fakes import FakeScheduler


def test_add_schedules_and_lists(state: AppState, fake_scheduler: FakeScheduler) -> None:
    resp = handle_request(state, Request.add("water", Period(timedelta(hours=1)), image="i.png"))

    assert resp.kind == ResponseKind.ADD_SUCCESS
    assert resp.task is not None
    assert fake_scheduler.added == [resp.task]
    assert resp.task.image == "i.png"

    listing = handle_request(state, Request.show())
    assert listing.kind == ResponseKind.TASKS
    assert [t.task_id for t in listing.tasks] == [resp.task.task_id]


def test_cancel_known_task(state: AppState, fake_scheduler: FakeScheduler) -> None:
    added = handle_request(state, Request.add("standup", OncePerDay(9, 30))).task
    assert added is not None

    resp = handle_request(state, Request.cancel(added.task_id))

    assert resp.kind == ResponseKind.REMOVE_SUCCESS
    assert fake_scheduler.cancelled == [added]
    assert state.registry.list_tasks() == []


def test_cancel_unknown_task_fails(state: AppState, fake_scheduler: FakeScheduler) -> None:
    resp = handle_request(state, Request.cancel("nope"))

    assert resp.kind == ResponseKind.FAIL
    assert "nope" in (resp.message or "")
    assert fake_scheduler.cancelled == []


def test_scheduler_unavailable_becomes_fail_response(state: AppState, fake_scheduler: FakeScheduler) -> None:
    fake_scheduler.unavailable = True

    resp = handle_request(state, Request.add("x", Period(timedelta(seconds=5))))

    assert resp.kind == ResponseKind.FAIL
    assert resp.message == "scheduler unavailable"
    assert state.registry.list_tasks() == []
