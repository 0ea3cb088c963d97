"""In-process async task manager for long-running operations.

Runs service coroutines as asyncio tasks on the server's event loop.
No external broker (Redis/Celery) needed for a single process.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from pydantic import BaseModel

from .models import TaskStatus

logger = logging.getLogger(__name__)


class TaskInfo:
    """Internal task tracking state."""

    __slots__ = ("task_id", "user_id", "kind", "status", "result", "error", "created_at", "completed_at")

    def __init__(self, task_id: str, user_id: str, kind: str):
        self.task_id = task_id
        self.user_id = user_id
        self.kind = kind
        self.status = TaskStatus.RUNNING
        self.result: Any = None
        self.error: str | None = None
        self.created_at = datetime.now(timezone.utc).isoformat()
        self.completed_at: str | None = None

    def to_dict(self) -> dict:
        return {
            "task_id": self.task_id,
            "kind": self.kind,
            "status": self.status.value,
            "result": self.result,
            "error": self.error,
            "created_at": self.created_at,
            "completed_at": self.completed_at,
        }


class TaskManager:
    """In-process task manager.

    Submits coroutines to run in the background, tracks their status per
    user, and stores results for polling via the /tasks endpoint.
    """

    def __init__(self):
        self._tasks: dict[str, TaskInfo] = {}
        # Strong references so running tasks are not garbage collected
        self._running: set[asyncio.Task] = set()

    async def submit(
        self,
        user_id: str,
        kind: str,
        func: Callable[..., Awaitable[Any]],
        *args,
        **kwargs,
    ) -> str:
        """Start a coroutine function in the background.

        Args:
            user_id: Owner of the task; only they can poll it.
            kind: Short label such as "scan" or "apply".
            func: Async callable to execute.
            *args, **kwargs: Arguments to pass to func.

        Returns:
            Task ID for polling status.
        """
        task_id = uuid.uuid4().hex[:12]
        task_info = TaskInfo(task_id, user_id, kind)
        self._tasks[task_id] = task_info

        task = asyncio.create_task(self._run(task_info, func, args, kwargs))
        self._running.add(task)
        task.add_done_callback(self._running.discard)

        logger.info("Task %s (%s) submitted for %s", task_id, kind, user_id)
        return task_id

    async def _run(
        self,
        task_info: TaskInfo,
        func: Callable[..., Awaitable[Any]],
        args: tuple,
        kwargs: dict,
    ) -> None:
        """Await the coroutine and capture result/error."""
        try:
            result = await func(*args, **kwargs)

            # Convert Pydantic models to dicts for JSON serialization
            if isinstance(result, BaseModel):
                result = result.model_dump(mode="json")

            task_info.status = TaskStatus.COMPLETED
            task_info.result = result
            logger.info("Task %s completed", task_info.task_id)
        except Exception as e:
            task_info.status = TaskStatus.FAILED
            task_info.error = str(e) or type(e).__name__
            logger.error("Task %s failed: %s", task_info.task_id, e)
        finally:
            task_info.completed_at = datetime.now(timezone.utc).isoformat()

    def get_task(self, task_id: str, user_id: str) -> dict | None:
        """Get task status by ID.

        Returns:
            Task info dict, or None if not found or owned by another user.
        """
        task_info = self._tasks.get(task_id)
        if not task_info or task_info.user_id != user_id:
            return None
        return task_info.to_dict()

    def get_tasks(self, user_id: str, limit: int = 20) -> list[dict]:
        """Get a user's recent tasks, newest first."""
        own = [t for t in self._tasks.values() if t.user_id == user_id]
        own.sort(key=lambda t: t.created_at, reverse=True)
        return [t.to_dict() for t in own[:limit]]

    async def wait_all(self) -> None:
        """Wait for every running task to finish."""
        if self._running:
            await asyncio.gather(*self._running, return_exceptions=True)
