"""Tests for scheduled job execution tracking."""

from unittest.mock import AsyncMock

import pytest

from stockpile.core import scheduler_tracker
from stockpile.core.scheduler_tracker import JobTracker, run_tracked_job


@pytest.fixture
def tracker(monkeypatch: pytest.MonkeyPatch) -> JobTracker:
    """Fresh tracker installed as the global one."""
    fresh = JobTracker()
    monkeypatch.setattr(scheduler_tracker, "job_tracker", fresh)
    return fresh


@pytest.mark.unit
class TestJobTracker:
    def test_unknown_job_has_empty_status(self) -> None:
        status = JobTracker().get_job_status("never_ran")

        assert status["consecutive_failures"] == 0
        assert status["last_success"] is None
        assert status["currently_running"] is False

    def test_failures_accumulate_until_success(self) -> None:
        tracker = JobTracker()

        assert tracker.record_job_failure("job", "boom") == 1
        assert tracker.record_job_failure("job", "boom") == 2
        tracker.record_job_success("job")

        status = tracker.get_job_status("job")
        assert status["consecutive_failures"] == 0
        assert status["failure_count"] == 2
        assert status["success_count"] == 1
        assert status["last_error"] == "boom"

    def test_running_flag(self) -> None:
        tracker = JobTracker()

        tracker.record_job_start("job")
        assert tracker.get_job_status("job")["currently_running"] is True

        tracker.record_job_success("job")
        assert tracker.get_job_status("job")["currently_running"] is False

    def test_long_errors_are_truncated(self) -> None:
        tracker = JobTracker()

        tracker.record_job_failure("job", "x" * 2000)

        assert len(tracker.get_job_status("job")["last_error"]) == scheduler_tracker.MAX_ERROR_LENGTH


@pytest.mark.unit
class TestRunTrackedJob:
    async def test_records_success(self, tracker: JobTracker) -> None:
        job = AsyncMock()

        await run_tracked_job(job, "job")

        job.assert_awaited_once()
        assert tracker.get_job_status("job")["success_count"] == 1

    async def test_failure_is_recorded_and_reraised_without_retry(self, tracker: JobTracker) -> None:
        job = AsyncMock(side_effect=RuntimeError("scan failed"))

        with pytest.raises(RuntimeError, match="scan failed"):
            await run_tracked_job(job, "job")

        assert job.await_count == 1
        status = tracker.get_job_status("job")
        assert status["consecutive_failures"] == 1
        assert status["currently_running"] is False
