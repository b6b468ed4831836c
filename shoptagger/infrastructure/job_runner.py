"""Background job runner.

Runs dispatched jobs on a pool of asyncio worker tasks. Each job gets a
bounded number of attempts under a timeout; when the last attempt fails
the job's ``failed`` hook runs so the failure is recorded somewhere.
No ordering is guaranteed between jobs.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any

import structlog

from shoptagger.infrastructure.config import settings
from shoptagger.infrastructure.shopify_client import SleepFunc

logger = structlog.get_logger()


class Job(ABC):
    """A unit of background work.

    Attributes:
        tries: Maximum attempts before the job is failed.
        timeout: Seconds allowed per attempt.
    """

    tries: int = 3
    timeout: float = 300.0

    @abstractmethod
    async def handle(self) -> None:
        """Do the work. Raising marks the attempt as failed."""

    async def failed(self, exc: BaseException) -> None:
        """Called once after the final attempt fails."""

    def describe(self) -> dict[str, Any]:
        """Context fields for log lines."""
        return {"job": type(self).__name__}


class JobRunner(ABC):
    """Accepts jobs for eventual, at-least-once execution."""

    @abstractmethod
    async def dispatch(self, job: Job) -> None:
        """Enqueue a job and return without waiting for it."""


class AsyncioJobRunner(JobRunner):
    """In-process job runner backed by an ``asyncio.Queue``.

    Example usage:
        runner = AsyncioJobRunner(workers=4)
        await runner.start()
        await runner.dispatch(job)
        ...
        await runner.stop()
    """

    def __init__(
        self,
        workers: int = 4,
        retry_delay: float = 1.0,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """Initialize runner.

        Args:
            workers: Number of concurrent worker tasks.
            retry_delay: Base pause between attempts (multiplied by attempt).
            sleep: Coroutine used for pauses.
        """
        self.worker_count = max(1, workers)
        self.retry_delay = retry_delay
        self._sleep = sleep
        self._queue: asyncio.Queue[Job] | None = None
        self._workers: list[asyncio.Task[None]] = []

    @property
    def running(self) -> bool:
        """Check if worker tasks are active."""
        return bool(self._workers)

    async def start(self) -> None:
        """Start worker tasks on the running event loop."""
        if not self._workers:
            self._launch()

    def _launch(self) -> asyncio.Queue[Job]:
        queue: asyncio.Queue[Job] = asyncio.Queue()
        self._queue = queue
        self._workers = [
            asyncio.create_task(self._worker(queue), name=f"job-worker-{n}")
            for n in range(self.worker_count)
        ]
        logger.info("Job runner started", workers=self.worker_count)
        return queue

    async def dispatch(self, job: Job) -> None:
        queue = self._queue
        if queue is None or not self._workers:
            queue = self._launch()
        queue.put_nowait(job)
        logger.debug("Job dispatched", queued=queue.qsize(), **job.describe())

    async def join(self) -> None:
        """Wait until every dispatched job has finished."""
        if self._queue is not None:
            await self._queue.join()

    async def stop(self, drain: bool = True) -> None:
        """Stop worker tasks.

        Args:
            drain: Finish queued jobs before stopping.
        """
        if not self._workers:
            return
        if drain:
            await self.join()
        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        self._queue = None
        logger.info("Job runner stopped")

    async def _worker(self, queue: asyncio.Queue[Job]) -> None:
        while True:
            job = await queue.get()
            try:
                await self.run_job(job)
            finally:
                queue.task_done()

    async def run_job(self, job: Job) -> bool:
        """Run one job through its attempts.

        Args:
            job: Job to run.

        Returns:
            True if an attempt succeeded.
        """
        tries = max(1, job.tries)
        last_error: BaseException | None = None

        for attempt in range(1, tries + 1):
            try:
                await asyncio.wait_for(job.handle(), timeout=job.timeout)
                return True
            except asyncio.CancelledError:
                raise
            except Exception as e:
                last_error = e
                logger.warning(
                    "Job attempt failed",
                    attempt=attempt,
                    tries=tries,
                    error=str(e) or type(e).__name__,
                    **job.describe(),
                )
                if attempt < tries:
                    await self._sleep(self.retry_delay * attempt)

        logger.error("Job failed permanently", tries=tries, **job.describe())
        try:
            await job.failed(last_error)
        except Exception:
            logger.exception("Job failure handler raised", **job.describe())
        return False


# ============================================================================
# Runner Singleton
# ============================================================================


_job_runner: AsyncioJobRunner | None = None


def get_job_runner() -> AsyncioJobRunner:
    """Get the job runner singleton."""
    global _job_runner
    if _job_runner is None:
        _job_runner = AsyncioJobRunner(workers=settings.tag_worker_count)
    return _job_runner


async def shutdown_job_runner() -> None:
    """Drain and stop the job runner singleton."""
    global _job_runner
    if _job_runner is not None:
        await _job_runner.stop(drain=True)
        _job_runner = None
