"""
Supervisor for fire-and-forget recipe generation tasks.

The start endpoint returns as soon as the initial status is written; the
run itself is an asyncio.Task owned here. The supervisor keeps a strong
reference to each task, pairs it with a cancellation event, and tears
outstanding runs down on application shutdown.
"""

import asyncio
import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

JobKey = tuple[str, str]  # (user_id, week_id)


@dataclass
class RecipeJob:
    """A running generation task and its cancellation signal."""

    user_id: str
    week_id: str
    task: asyncio.Task
    cancel_event: asyncio.Event = field(default_factory=asyncio.Event)

    @property
    def done(self) -> bool:
        return self.task.done()


class RecipeJobSupervisor:
    """Tracks one in-process generation task per (user, week)."""

    def __init__(self) -> None:
        self._jobs: dict[JobKey, RecipeJob] = {}

    def spawn(
        self,
        user_id: str,
        week_id: str,
        run: Callable[[asyncio.Event], Coroutine[Any, Any, Any]],
    ) -> RecipeJob:
        """
        Start `run(cancel_event)` as a background task.

        The caller must already hold the week's generation guard; a still
        running task for the same key is a programming error.
        """
        key = (user_id, week_id)
        existing = self._jobs.get(key)
        if existing is not None and not existing.done:
            raise RuntimeError(f"Recipe job already running for {user_id}/{week_id}")

        cancel_event = asyncio.Event()
        task = asyncio.create_task(run(cancel_event), name=f"recipes:{user_id}:{week_id}")
        job = RecipeJob(user_id=user_id, week_id=week_id, task=task, cancel_event=cancel_event)
        self._jobs[key] = job
        task.add_done_callback(lambda t: self._on_done(key, t))
        return job

    def cancel(self, user_id: str, week_id: str) -> bool:
        """Signal a local run to stop at its next batch boundary."""
        job = self._jobs.get((user_id, week_id))
        if job is None or job.done:
            return False
        job.cancel_event.set()
        return True

    def get(self, user_id: str, week_id: str) -> RecipeJob | None:
        return self._jobs.get((user_id, week_id))

    def is_running(self, user_id: str, week_id: str) -> bool:
        job = self._jobs.get((user_id, week_id))
        return job is not None and not job.done

    @property
    def running_count(self) -> int:
        return sum(1 for job in self._jobs.values() if not job.done)

    async def shutdown(self, timeout: float = 5.0) -> None:
        """Signal every run, give them `timeout` seconds, then cancel the rest."""
        jobs = [job for job in self._jobs.values() if not job.done]
        if not jobs:
            return

        logger.info(f"Stopping {len(jobs)} recipe generation job(s)")
        for job in jobs:
            job.cancel_event.set()

        _, pending = await asyncio.wait([job.task for job in jobs], timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def _on_done(self, key: JobKey, task: asyncio.Task) -> None:
        if self._jobs.get(key) is not None and self._jobs[key].task is task:
            del self._jobs[key]
        if task.cancelled():
            logger.warning(f"Recipe job {key[0]}/{key[1]} was cancelled")
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Recipe job {key[0]}/{key[1]} crashed: {error!r}")
