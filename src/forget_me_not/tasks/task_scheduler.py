# src/forget_me_not/tasks/task_scheduler.py

from __future__ import annotations

"""
Task scheduler.

Two halves:
- Scheduler (facade): called from any thread. Owns one background thread with
  a private asyncio loop and feeds it through a bounded mailbox.
- TaskCoordinator: runs on that loop. It is the only reader and writer of the
  cancellation registry, so the registry needs no lock.

A full mailbox blocks the caller (backpressure). Once the background thread
is gone every facade call raises SchedulerUnavailable.
"""

import asyncio
import concurrent.futures
import contextlib
import logging
import threading
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from datetime import timezone
from functools import partial
from typing import Any

from ..core.ports import Notifier
from ..core.timeparse import local_offset, utc_now
from ..errors import SchedulerUnavailable, SignalClosed
from .task_clocks import Clock, StopSignal, daily_clock, once_clock, period_clock
from .task_models import Once, OncePerDay, Period, Task

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 8
DEFAULT_SUMMARY = "forget-me-not"

# How often a blocked caller re-checks that the scheduler thread is alive.
_LIVENESS_POLL_S = 0.2

FinishedHook = Callable[[Task], None]


@dataclass(slots=True, frozen=True)
class AddCommand:
    task: Task


@dataclass(slots=True, frozen=True)
class CancelCommand:
    task_id: str


@dataclass(slots=True, frozen=True)
class CloseCommand:
    pass


SchedulerCommand = AddCommand | CancelCommand | CloseCommand


@dataclass(slots=True)
class _LiveTask:
    stop: StopSignal
    timer: asyncio.Task[None]


class TaskCoordinator:
    """
    Single-threaded owner of scheduling state.

    Registry invariant: while a task's clock is running there is exactly one
    entry for its id. Entries go away on explicit cancel and when a clock
    finishes on its own.
    """

    def __init__(
            self,
            notifier: Notifier,
            *,
            offset: timezone,
            summary: str = DEFAULT_SUMMARY,
            on_finished: FinishedHook | None = None,
            now: Clock = utc_now,
    ) -> None:
        self._notifier = notifier
        self._offset = offset
        self._summary = summary
        self._on_finished = on_finished
        self._now = now
        self._registry: dict[str, _LiveTask] = {}

    @property
    def live_task_ids(self) -> list[str]:
        return list(self._registry)

    async def run(self, commands: asyncio.Queue[SchedulerCommand]) -> None:
        logger.info("Scheduler loop started.")
        try:
            while True:
                command = await commands.get()
                if isinstance(command, CloseCommand):
                    logger.info("Scheduler loop closing.")
                    break
                try:
                    self._dispatch(command)
                except Exception:
                    # Failures stay scoped to the one command.
                    logger.exception("Scheduler command failed: %r", command)
        finally:
            await self._stop_all()
            logger.info("Scheduler loop stopped.")

    def _dispatch(self, command: SchedulerCommand) -> None:
        if isinstance(command, AddCommand):
            self.add_task(command.task)
        elif isinstance(command, CancelCommand):
            self.cancel_task(command.task_id)
        else:
            logger.error("Unknown scheduler command: %r", command)

    def add_task(self, task: Task) -> None:
        if task.task_id in self._registry:
            logger.warning("Task %s is already scheduled; ignoring duplicate add", task.task_id)
            return

        logger.info("Add task %s (%s): %s", task.task_id, task.clock.describe(), task.description)
        stop = StopSignal()
        timer = asyncio.create_task(self._clock_for(task, stop), name=f"clock-{task.task_id}")
        self._registry[task.task_id] = _LiveTask(stop=stop, timer=timer)
        timer.add_done_callback(partial(self._on_timer_done, task, stop))

    def cancel_task(self, task_id: str) -> None:
        live = self._registry.pop(task_id, None)
        if live is None:
            logger.warning("Cancel: no live task with id %s", task_id)
            return
        try:
            live.stop.send()
            logger.info("Task %s cancelled", task_id)
        except SignalClosed:
            logger.error("Cancel: task %s already finished", task_id)

    def _clock_for(self, task: Task, stop: StopSignal) -> Coroutine[Any, Any, None]:
        clock = task.clock
        if isinstance(clock, Once):
            return once_clock(task, clock, stop, self._notifier, summary=self._summary, now=self._now)
        if isinstance(clock, Period):
            return period_clock(task, clock, stop, self._notifier, summary=self._summary)
        if isinstance(clock, OncePerDay):
            return daily_clock(
                task,
                clock,
                stop,
                self._notifier,
                summary=self._summary,
                offset=self._offset,
                now=self._now,
            )
        raise TypeError(f"unsupported clock type: {type(clock).__name__}")

    def _on_timer_done(self, task: Task, stop: StopSignal, timer: asyncio.Task[None]) -> None:
        live = self._registry.get(task.task_id)
        if live is not None and live.stop is stop:
            del self._registry[task.task_id]

        if not timer.cancelled() and timer.exception() is not None:
            logger.error(
                "Clock for task %s crashed",
                task.task_id,
                exc_info=timer.exception(),
            )

        if self._on_finished is not None:
            try:
                self._on_finished(task)
            except Exception:
                logger.exception("on_finished hook failed task_id=%s", task.task_id)

    async def _stop_all(self) -> None:
        live = list(self._registry.values())
        self._registry.clear()
        for entry in live:
            with contextlib.suppress(SignalClosed):
                entry.stop.send()
        if live:
            await asyncio.gather(*(e.timer for e in live), return_exceptions=True)


class Scheduler:
    """
    Thread-safe facade over the scheduler loop.

    Constructing it starts exactly one daemon thread. add_task/cancel_task
    return once the command is in the mailbox, not once it was processed.
    """

    def __init__(
            self,
            notifier: Notifier,
            *,
            capacity: int = DEFAULT_CAPACITY,
            summary: str = DEFAULT_SUMMARY,
            on_finished: FinishedHook | None = None,
            offset: timezone | None = None,
            now: Clock = utc_now,
    ) -> None:
        self._capacity = max(1, int(capacity))
        self._coordinator = TaskCoordinator(
            notifier,
            offset=offset if offset is not None else local_offset(),
            summary=summary,
            on_finished=on_finished,
            now=now,
        )

        self._terminated = threading.Event()
        self._close_lock = threading.Lock()
        self._closing = False

        ready = threading.Event()
        holder: dict[str, object] = {}

        self._thread = threading.Thread(
            target=self._runner,
            args=(ready, holder),
            name="fmn-scheduler",
            daemon=True,
        )
        self._thread.start()
        ready.wait()
        if "commands" not in holder:
            raise SchedulerUnavailable("scheduler thread failed to start")

        self._loop: asyncio.AbstractEventLoop = holder["loop"]  # type: ignore[assignment]
        self._commands: asyncio.Queue[SchedulerCommand] = holder["commands"]  # type: ignore[assignment]
        logger.info("Scheduler thread started (capacity=%d).", self._capacity)

    def _runner(self, ready: threading.Event, holder: dict[str, object]) -> None:
        async def make_queue() -> asyncio.Queue[SchedulerCommand]:
            return asyncio.Queue(maxsize=self._capacity)

        try:
            loop = asyncio.new_event_loop()
            asyncio.set_event_loop(loop)
            holder["loop"] = loop
            holder["commands"] = loop.run_until_complete(make_queue())
        except Exception:
            logger.exception("Scheduler thread failed to start.")
            self._terminated.set()
            return
        finally:
            ready.set()

        try:
            loop.run_until_complete(self._coordinator.run(holder["commands"]))  # type: ignore[arg-type]
        except Exception:
            logger.exception("Scheduler loop crashed.")
        finally:
            self._terminated.set()
            # Release callers blocked on a full mailbox and stop stray clocks.
            pending = asyncio.all_tasks(loop)
            for t in pending:
                t.cancel()
            if pending:
                with contextlib.suppress(Exception):
                    loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            with contextlib.suppress(Exception):
                loop.close()
            logger.info("Scheduler thread exited.")

    @property
    def is_running(self) -> bool:
        return not self._terminated.is_set()

    def add_task(self, task: Task) -> None:
        self._send(AddCommand(task))
        logger.debug("Sent task %s to scheduler", task.task_id)

    def cancel_task(self, task: Task) -> None:
        self._send(CancelCommand(task.task_id))
        logger.debug("Sent cancel for task %s to scheduler", task.task_id)

    def close(self, timeout: float | None = 5.0) -> None:
        """Stop every clock and the background thread. Idempotent."""
        with self._close_lock:
            if self._closing:
                self._thread.join(timeout=timeout)
                return
            self._closing = True

        if self.is_running:
            try:
                self._put(CloseCommand())
            except SchedulerUnavailable:
                pass
        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            logger.warning("Scheduler thread did not stop within %.1fs", timeout or 0.0)

    def _send(self, command: SchedulerCommand) -> None:
        if self._closing:
            raise SchedulerUnavailable("scheduler is closed")
        self._put(command)

    def _put(self, command: SchedulerCommand) -> None:
        if self._terminated.is_set():
            raise SchedulerUnavailable("scheduler thread has terminated")

        try:
            fut = asyncio.run_coroutine_threadsafe(self._commands.put(command), self._loop)
        except RuntimeError as e:
            # Loop already closed.
            raise SchedulerUnavailable("scheduler thread has terminated") from e

        while True:
            try:
                fut.result(timeout=_LIVENESS_POLL_S)
                return
            except concurrent.futures.TimeoutError:
                if self._terminated.is_set():
                    fut.cancel()
                    raise SchedulerUnavailable("scheduler thread terminated while sending") from None
            except concurrent.futures.CancelledError:
                raise SchedulerUnavailable("scheduler thread terminated while sending") from None
