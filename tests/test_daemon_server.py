# tests/test_daemon_server.py

from __future__ import annotations

import socket
from collections.abc import Iterator
from datetime import timedelta
from types import SimpleNamespace

import pytest

from forget_me_not.cli.bootstrap import create_initial_state
from forget_me_not.core.state import AppState
from forget_me_not.core.timeparse import utc_now
from forget_me_not.daemon.client import send_request
from forget_me_not.daemon.protocol import Request, ResponseKind, decode_response
from forget_me_not.daemon.server import DaemonServer, start_server_in_background
from forget_me_not.tasks.task_models import Once, Period

from .fakes import FakeNotifier, wait_until


@pytest.fixture()
def daemon(settings: SimpleNamespace, notifier: FakeNotifier) -> Iterator[tuple[AppState, str, int]]:
    """Real daemon stack (scheduler thread + TCP server) on an ephemeral port."""
    state = create_initial_state(settings=settings, notifier=notifier)
    server = DaemonServer(("127.0.0.1", 0), state)
    thread = start_server_in_background(server)
    host, port = server.server_address[:2]
    try:
        yield state, host, port
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5.0)
        state.scheduler.close()


def test_add_list_rm_over_tcp(daemon: tuple[AppState, str, int]) -> None:
    _state, host, port = daemon

    added = send_request(Request.add("water", Period(timedelta(hours=1))), host, port)
    assert added.kind == ResponseKind.ADD_SUCCESS and added.task is not None

    listing = send_request(Request.show(), host, port)
    assert [t.description for t in listing.tasks] == ["water"]

    removed = send_request(Request.cancel(added.task.task_id), host, port)
    assert removed.kind == ResponseKind.REMOVE_SUCCESS
    assert send_request(Request.show(), host, port).tasks == []


def test_fired_once_task_leaves_the_listing(daemon: tuple[AppState, str, int], notifier: FakeNotifier) -> None:
    state, host, port = daemon

    send_request(Request.add("soon", Once(utc_now() + timedelta(milliseconds=100))), host, port)

    assert wait_until(lambda: notifier.bodies == ["soon"])
    assert wait_until(lambda: state.registry.count() == 0)
    assert notifier.calls[0].summary == "fmn-test"


def test_garbage_gets_a_fail_response(daemon: tuple[AppState, str, int]) -> None:
    _state, host, port = daemon

    with socket.create_connection((host, port), timeout=2.0) as sock:
        sock.sendall(b"this is not json\n")
        with sock.makefile("rb") as reader:
            resp = decode_response(reader.readline())

    assert resp.kind == ResponseKind.FAIL


@pytest.mark.parametrize(
    "line",
    [
        b'\xff\xfe{"kind": "show"}\n',
        b'{"kind": "add", "description": "x", "clock": {"type": "period", "seconds": 1e17}}\n',
    ],
)
def test_undecodable_input_gets_a_fail_response(daemon: tuple[AppState, str, int], line: bytes) -> None:
    _state, host, port = daemon

    with socket.create_connection((host, port), timeout=2.0) as sock:
        sock.sendall(line)
        with sock.makefile("rb") as reader:
            resp = decode_response(reader.readline())

    assert resp.kind == ResponseKind.FAIL
