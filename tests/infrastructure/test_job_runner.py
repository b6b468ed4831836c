"""Tests for the background job runner."""

import asyncio

import pytest

from shoptagger.application.tagging_service import ApplyProductTagJob
from shoptagger.domain.models import AuditStatus, TagAction
from shoptagger.infrastructure.audit_repository import InMemoryAuditLogRepository
from shoptagger.infrastructure.job_runner import AsyncioJobRunner, Job
from tests.conftest import SleepRecorder


class FlakyJob(Job):
    """Fails a fixed number of times before succeeding."""

    def __init__(self, failures: int, tries: int = 3) -> None:
        self.failures = failures
        self.tries = tries
        self.attempts = 0
        self.failed_with: BaseException | None = None

    async def handle(self) -> None:
        self.attempts += 1
        if self.attempts <= self.failures:
            raise RuntimeError(f"attempt {self.attempts} failed")

    async def failed(self, exc: BaseException) -> None:
        self.failed_with = exc


class SlowJob(Job):
    timeout = 0.01
    tries = 2

    async def handle(self) -> None:
        await asyncio.sleep(1)


class TestRunJob:
    """Tests for attempt handling."""

    @pytest.mark.asyncio
    async def test_success_after_retries(self, sleep: SleepRecorder) -> None:
        runner = AsyncioJobRunner(sleep=sleep)
        job = FlakyJob(failures=2)

        assert await runner.run_job(job)
        assert job.attempts == 3
        assert job.failed_with is None
        assert sleep.calls == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_failed_hook_after_last_attempt(self, sleep: SleepRecorder) -> None:
        runner = AsyncioJobRunner(sleep=sleep)
        job = FlakyJob(failures=5)

        assert not await runner.run_job(job)
        assert job.attempts == 3
        assert str(job.failed_with) == "attempt 3 failed"
        assert sleep.calls == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_timeout_counts_as_failure(self, sleep: SleepRecorder) -> None:
        runner = AsyncioJobRunner(sleep=sleep)

        assert not await runner.run_job(SlowJob())
        assert sleep.calls == [1.0]

    @pytest.mark.asyncio
    async def test_failed_hook_errors_are_contained(self, sleep: SleepRecorder) -> None:
        class BrokenHook(FlakyJob):
            async def failed(self, exc: BaseException) -> None:
                raise RuntimeError("audit store down")

        runner = AsyncioJobRunner(sleep=sleep)

        assert not await runner.run_job(BrokenHook(failures=5, tries=1))


class TestWorkers:
    """Tests for queueing and worker lifecycle."""

    @pytest.mark.asyncio
    async def test_dispatch_and_join(self, sleep: SleepRecorder) -> None:
        runner = AsyncioJobRunner(workers=2, sleep=sleep)
        jobs = [FlakyJob(failures=n % 2) for n in range(6)]

        for job in jobs:
            await runner.dispatch(job)
        assert runner.running
        await runner.join()
        await runner.stop()

        assert not runner.running
        assert all(job.failed_with is None for job in jobs)
        assert sum(job.attempts for job in jobs) == 9

    @pytest.mark.asyncio
    async def test_stop_drains_queue(self, sleep: SleepRecorder) -> None:
        runner = AsyncioJobRunner(workers=1, sleep=sleep)
        await runner.start()
        jobs = [FlakyJob(failures=0) for _ in range(4)]
        for job in jobs:
            await runner.dispatch(job)

        await runner.stop(drain=True)

        assert all(job.attempts == 1 for job in jobs)

    @pytest.mark.asyncio
    async def test_dispatch_after_stop_restarts_workers(self, sleep: SleepRecorder) -> None:
        runner = AsyncioJobRunner(workers=1, sleep=sleep)
        await runner.start()
        await runner.stop()
        job = FlakyJob(failures=0)

        await runner.dispatch(job)
        await runner.join()
        await runner.stop()

        assert job.attempts == 1


class TestApplyProductTagJob:
    """Tests for the tagging job's terminal failure record."""

    @pytest.mark.asyncio
    async def test_failed_writes_audit_record(self) -> None:
        repo = InMemoryAuditLogRepository()
        job = ApplyProductTagJob(
            product_id="gid://shopify/Product/1",
            tag="sale",
            client=None,  # type: ignore[arg-type]
            audit_repo=repo,
        )

        await job.failed(TimeoutError())

        entries = await repo.list_for_product("gid://shopify/Product/1")
        assert len(entries) == 1
        assert entries[0].action == TagAction.FAILED
        assert entries[0].status == AuditStatus.ERROR
        assert entries[0].error_message == "TimeoutError"

    @pytest.mark.asyncio
    async def test_unexpected_errors_end_in_audit_record(self, sleep: SleepRecorder) -> None:
        class ExplodingClient:
            async def add_tag_to_product(self, product_id: str, tag: str):
                raise ConnectionError("socket closed")

        repo = InMemoryAuditLogRepository()
        job = ApplyProductTagJob(
            product_id="gid://shopify/Product/1",
            tag="sale",
            client=ExplodingClient(),  # type: ignore[arg-type]
            audit_repo=repo,
        )

        assert not await AsyncioJobRunner(sleep=sleep).run_job(job)

        entries = await repo.list_recent()
        assert len(entries) == 1
        assert entries[0].error_message == "socket closed"
