"""In-process background job runner with per-attempt timeouts and retries."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from tenacity import AsyncRetrying, before_sleep_log, stop_after_attempt, wait_exponential

from ..logging import generate_correlation_id, get_logger, reset_correlation_id, set_correlation_id

logger = get_logger()

JobFactory = Callable[[], Awaitable[Any]]
FailureCallback = Callable[[BaseException], Awaitable[None]]


class BackgroundJobRunner:
    """Runs units of work as asyncio tasks, at least once and at most N times.

    Each attempt gets a fresh coroutine from the job's factory and is bounded
    by ``asyncio.wait_for``, so a timed-out attempt is cancelled before the
    next one starts. Attempts are driven by tenacity with exponential backoff.
    When every attempt has failed, the job's ``on_failure`` callback runs
    once with the last exception.

    Jobs are keyed; submitting a key that is still pending is a no-op.

    Example:
        ```python
        runner = BackgroundJobRunner(retry_min_wait=5, retry_max_wait=60)
        runner.submit(
            "ingest:42",
            lambda: pipeline.run(42),
            timeout=600,
            max_attempts=3,
            on_failure=lambda exc: pipeline.handle_terminal_failure(42, exc),
        )
        ```
    """

    def __init__(self, retry_min_wait: float = 5.0, retry_max_wait: float = 60.0):
        self._retry_min_wait = retry_min_wait
        self._retry_max_wait = retry_max_wait
        self._tasks: Dict[str, asyncio.Task] = {}

    def is_pending(self, key: str) -> bool:
        task = self._tasks.get(key)
        return task is not None and not task.done()

    @property
    def pending_count(self) -> int:
        return sum(1 for task in self._tasks.values() if not task.done())

    def submit(
        self,
        key: str,
        factory: JobFactory,
        timeout: float,
        max_attempts: int = 3,
        on_failure: Optional[FailureCallback] = None,
    ) -> bool:
        """Schedule a job on the running event loop.

        Returns:
            True if the job was scheduled, False if ``key`` is already pending.
        """
        if self.is_pending(key):
            logger.debug(f"Job {key} is already pending, skipping submission")
            return False

        task = asyncio.create_task(self._execute(key, factory, timeout, max_attempts, on_failure), name=f"job:{key}")
        self._tasks[key] = task
        task.add_done_callback(lambda finished: self._forget(key, finished))
        logger.info(f"Job {key} submitted", extra={"job": key, "timeout": timeout, "max_attempts": max_attempts})
        return True

    async def wait_idle(self) -> None:
        """Wait until every job submitted so far has finished."""
        while True:
            pending = [task for task in self._tasks.values() if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel outstanding jobs and wait for them to unwind."""
        tasks = [task for task in self._tasks.values() if not task.done()]
        if not tasks:
            return

        logger.info(f"Cancelling {len(tasks)} pending background jobs")
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    async def _execute(
        self,
        key: str,
        factory: JobFactory,
        timeout: float,
        max_attempts: int,
        on_failure: Optional[FailureCallback],
    ) -> None:
        token = set_correlation_id(generate_correlation_id())
        try:
            retrying = AsyncRetrying(
                stop=stop_after_attempt(max_attempts),
                wait=wait_exponential(multiplier=1, min=self._retry_min_wait, max=self._retry_max_wait),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            )
            async for attempt in retrying:
                with attempt:
                    await asyncio.wait_for(factory(), timeout=timeout)
            logger.info(f"Job {key} finished", extra={"job": key})
        except Exception as exc:
            logger.error(
                f"Job {key} failed after {max_attempts} attempts: {exc}",
                extra={"job": key, "error_type": type(exc).__name__},
            )
            if on_failure is not None:
                await self._notify_failure(key, on_failure, exc)
        finally:
            reset_correlation_id(token)

    async def _notify_failure(self, key: str, on_failure: FailureCallback, exc: BaseException) -> None:
        try:
            await on_failure(exc)
        except Exception:
            logger.exception(f"Failure callback for job {key} raised")

    def _forget(self, key: str, task: asyncio.Task) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]
