# src/forget_me_not/daemon/protocol.py

"""
Client/daemon wire format.

One JSON object per line, one request and one response per TCP connection.

Requests:
    {"kind": "add", "description": "...", "clock": {...}, "image": null, "sound": null}
    {"kind": "cancel", "task_id": "..."}
    {"kind": "show"}

Clocks:
    {"type": "once", "fire_at": "2026-10-16T09:30:00+02:00"}
    {"type": "period", "seconds": 3600}
    {"type": "once_per_day", "hour": 9, "minute": 30}
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum
from typing import Any

from ..errors import ConfigurationError, ProtocolError
from ..tasks.task_models import ClockType, Once, OncePerDay, Period, Task

ENCODING = "utf-8"

MAX_REQUEST_BYTES = 64 * 1024
# `fmn list` can be long.
MAX_RESPONSE_BYTES = 4 * 1024 * 1024


class RequestKind(StrEnum):
    ADD = "add"
    CANCEL = "cancel"
    SHOW = "show"


class ResponseKind(StrEnum):
    ADD_SUCCESS = "add_success"
    REMOVE_SUCCESS = "remove_success"
    FAIL = "fail"
    TASKS = "tasks"


@dataclass(slots=True, frozen=True)
class Request:
    kind: RequestKind
    description: str | None = None
    clock: ClockType | None = None
    image: str | None = None
    sound: str | None = None
    task_id: str | None = None

    @classmethod
    def add(
            cls,
            description: str,
            clock: ClockType,
            *,
            image: str | None = None,
            sound: str | None = None,
    ) -> Request:
        return cls(RequestKind.ADD, description=description, clock=clock, image=image, sound=sound)

    @classmethod
    def cancel(cls, task_id: str) -> Request:
        return cls(RequestKind.CANCEL, task_id=task_id)

    @classmethod
    def show(cls) -> Request:
        return cls(RequestKind.SHOW)


@dataclass(slots=True, frozen=True)
class Response:
    kind: ResponseKind
    message: str | None = None
    task: Task | None = None
    tasks: list[Task] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.kind != ResponseKind.FAIL

    @classmethod
    def fail(cls, message: str) -> Response:
        return cls(ResponseKind.FAIL, message=message)


# ---- clocks / tasks ----


def clock_to_dict(clock: ClockType) -> dict[str, Any]:
    if isinstance(clock, Once):
        return {"type": "once", "fire_at": clock.fire_at.isoformat()}
    if isinstance(clock, Period):
        return {"type": "period", "seconds": int(clock.every.total_seconds())}
    if isinstance(clock, OncePerDay):
        return {"type": "once_per_day", "hour": clock.hour, "minute": clock.minute}
    raise ProtocolError(f"unsupported clock type: {type(clock).__name__}")


def clock_from_dict(raw: Any) -> ClockType:
    """Decode a clock; an invalid rule raises ConfigurationError."""
    if not isinstance(raw, dict):
        raise ProtocolError("clock must be an object")
    kind = raw.get("type")
    try:
        if kind == "once":
            return Once(datetime.fromisoformat(str(raw["fire_at"])))
        if kind == "period":
            return Period(timedelta(seconds=int(raw["seconds"])))
        if kind == "once_per_day":
            return OncePerDay(int(raw["hour"]), int(raw["minute"]))
    except (KeyError, TypeError) as e:
        raise ProtocolError(f"malformed {kind} clock: {e!r}") from e
    except ConfigurationError:
        raise
    except (ValueError, OverflowError) as e:
        raise ConfigurationError(f"invalid {kind} clock: {e}") from e
    raise ProtocolError(f"unknown clock type: {kind!r}")


def task_to_dict(task: Task) -> dict[str, Any]:
    return {
        "task_id": task.task_id,
        "description": task.description,
        "clock": clock_to_dict(task.clock),
        "created_at": task.created_at.isoformat(),
        "image": task.image,
        "sound": task.sound,
    }


def task_from_dict(raw: Any) -> Task:
    if not isinstance(raw, dict):
        raise ProtocolError("task must be an object")
    try:
        return Task(
            task_id=str(raw["task_id"]),
            description=str(raw["description"]),
            clock=clock_from_dict(raw["clock"]),
            created_at=datetime.fromisoformat(str(raw["created_at"])),
            image=raw.get("image"),
            sound=raw.get("sound"),
        )
    except (KeyError, ValueError) as e:
        raise ProtocolError(f"malformed task: {e!r}") from e


# ---- requests / responses ----


def _loads(line: bytes | str) -> dict[str, Any]:
    if isinstance(line, bytes):
        try:
            line = line.decode(ENCODING)
        except UnicodeDecodeError as e:
            raise ProtocolError(f"message is not valid {ENCODING}: {e}") from e
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise ProtocolError(f"invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ProtocolError("message must be a JSON object")
    return data


def _dumps(data: dict[str, Any]) -> bytes:
    return (json.dumps(data, ensure_ascii=False) + "\n").encode(ENCODING)


def encode_request(request: Request) -> bytes:
    data: dict[str, Any] = {"kind": request.kind.value}
    if request.kind == RequestKind.ADD:
        if request.clock is None:
            raise ProtocolError("add request without a clock")
        data.update(
            description=request.description or "",
            clock=clock_to_dict(request.clock),
            image=request.image,
            sound=request.sound,
        )
    elif request.kind == RequestKind.CANCEL:
        data["task_id"] = request.task_id
    return _dumps(data)


def decode_request(line: bytes | str) -> Request:
    data = _loads(line)
    try:
        kind = RequestKind(data.get("kind"))
    except ValueError:
        raise ProtocolError(f"unknown request kind: {data.get('kind')!r}") from None

    if kind == RequestKind.ADD:
        description = str(data.get("description") or "").strip()
        if not description:
            raise ProtocolError("add request needs a description")
        return Request.add(
            description,
            clock_from_dict(data.get("clock")),
            image=data.get("image") or None,
            sound=data.get("sound") or None,
        )
    if kind == RequestKind.CANCEL:
        task_id = str(data.get("task_id") or "").strip()
        if not task_id:
            raise ProtocolError("cancel request needs a task_id")
        return Request.cancel(task_id)
    return Request.show()


def encode_response(response: Response) -> bytes:
    data: dict[str, Any] = {"kind": response.kind.value}
    if response.message is not None:
        data["message"] = response.message
    if response.task is not None:
        data["task"] = task_to_dict(response.task)
    if response.kind == ResponseKind.TASKS:
        data["tasks"] = [task_to_dict(t) for t in response.tasks]
    return _dumps(data)


def decode_response(line: bytes | str) -> Response:
    data = _loads(line)
    try:
        kind = ResponseKind(data.get("kind"))
    except ValueError:
        raise ProtocolError(f"unknown response kind: {data.get('kind')!r}") from None

    task = task_from_dict(data["task"]) if data.get("task") is not None else None
    tasks = [task_from_dict(t) for t in data.get("tasks") or []]
    message = data.get("message")
    return Response(kind, message=str(message) if message is not None else None, task=task, tasks=tasks)
