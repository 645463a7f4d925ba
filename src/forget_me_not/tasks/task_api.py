# src/forget_me_not/tasks/task_api.py

from __future__ import annotations

import logging

from ..core.state import AppState
from ..daemon.protocol import Request, RequestKind, Response, ResponseKind
from ..errors import SchedulerUnavailable
from .task_models import Task, new_task

logger = logging.getLogger(__name__)


def schedule_task(state: AppState, request: Request) -> Task:
    """
    Create a Task for an add request and hand it to the scheduler.

    The listing entry is written first: a clock that finishes immediately
    (e.g. a time already in the past) removes it again through on_finished.
    """
    assert request.clock is not None
    task = new_task(
        request.description or "",
        request.clock,
        image=request.image,
        sound=request.sound,
    )
    state.registry.add(task)
    try:
        state.scheduler.add_task(task)
    except SchedulerUnavailable:
        state.registry.remove(task.task_id)
        raise
    return task


def cancel_task(state: AppState, task_id: str) -> Task | None:
    """Cancel by id. Returns None when the id is not listed."""
    task = state.registry.get(task_id)
    if task is None:
        logger.info("Cancel requested for unknown task %s", task_id)
        return None
    state.scheduler.cancel_task(task)
    state.registry.remove(task_id)
    return task


def handle_request(state: AppState, request: Request) -> Response:
    try:
        if request.kind == RequestKind.ADD:
            task = schedule_task(state, request)
            logger.info("Scheduled task %s (%s)", task.task_id, task.clock.describe())
            return Response(ResponseKind.ADD_SUCCESS, task=task)

        if request.kind == RequestKind.CANCEL:
            task_id = request.task_id or ""
            if cancel_task(state, task_id) is None:
                return Response.fail(f"no such task: {task_id}")
            return Response(ResponseKind.REMOVE_SUCCESS, message=task_id)

        return Response(ResponseKind.TASKS, tasks=state.registry.list_tasks())

    except SchedulerUnavailable:
        logger.exception("Scheduler unavailable while handling %s request", request.kind.value)
        return Response.fail("scheduler unavailable")
