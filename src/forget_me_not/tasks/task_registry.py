# src/forget_me_not/tasks/task_registry.py

from __future__ import annotations

import logging
import threading

from .task_models import Task

logger = logging.getLogger(__name__)


class TaskRegistry:
    """
    In-memory listing of scheduled tasks.

    This is what `fmn list` shows and how `fmn rm <id>` resolves an id into a
    Task. It is not the scheduler's cancellation registry, and it is not
    persisted: a restarted daemon starts empty.

    Thread-safety:
    - request handlers run in server threads, completion callbacks run in the
      scheduler thread, so every method takes the lock
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tasks: dict[str, Task] = {}

    def add(self, task: Task) -> None:
        with self._lock:
            if task.task_id in self._tasks:
                logger.warning("Task %s already registered; replacing", task.task_id)
            self._tasks[task.task_id] = task

    def get(self, task_id: str) -> Task | None:
        with self._lock:
            return self._tasks.get(task_id)

    def remove(self, task_id: str) -> Task | None:
        with self._lock:
            return self._tasks.pop(task_id, None)

    def list_tasks(self) -> list[Task]:
        with self._lock:
            tasks = list(self._tasks.values())
        tasks.sort(key=lambda t: t.created_at)
        return tasks

    def count(self) -> int:
        with self._lock:
            return len(self._tasks)

    def forget_finished(self, task: Task) -> None:
        """Scheduler `on_finished` hook: the task will never fire again."""
        if self.remove(task.task_id) is not None:
            logger.info("Task %s finished; removed from listing", task.task_id)
