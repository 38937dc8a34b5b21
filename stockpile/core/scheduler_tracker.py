"""Execution tracking for scheduled jobs."""

import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any


logger = logging.getLogger(__name__)

MAX_ERROR_LENGTH = 500


class JobTracker:
    """Track job execution history and health status (per process)."""

    def __init__(self) -> None:
        self._storage: dict[str, dict[str, Any]] = {}

    def _job(self, job_name: str) -> dict[str, Any]:
        return self._storage.setdefault(job_name, {})

    def record_job_start(self, job_name: str) -> None:
        self._job(job_name)["current_run"] = datetime.now(UTC).isoformat()

    def record_job_success(self, job_name: str) -> None:
        job = self._job(job_name)
        job["last_success"] = datetime.now(UTC).isoformat()
        job["consecutive_failures"] = 0
        job["success_count"] = job.get("success_count", 0) + 1
        job.pop("current_run", None)

    def record_job_failure(self, job_name: str, error: str) -> int:
        """Record a failed run.

        Returns:
            Number of consecutive failures including this one
        """
        job = self._job(job_name)
        job["last_failure"] = datetime.now(UTC).isoformat()
        job["last_error"] = error[:MAX_ERROR_LENGTH]
        job["consecutive_failures"] = job.get("consecutive_failures", 0) + 1
        job["failure_count"] = job.get("failure_count", 0) + 1
        job.pop("current_run", None)
        return job["consecutive_failures"]

    def get_job_status(self, job_name: str) -> dict[str, Any]:
        job = self._storage.get(job_name, {})
        return {
            "job_name": job_name,
            "last_success": job.get("last_success"),
            "last_failure": job.get("last_failure"),
            "last_error": job.get("last_error"),
            "consecutive_failures": job.get("consecutive_failures", 0),
            "success_count": job.get("success_count", 0),
            "failure_count": job.get("failure_count", 0),
            "currently_running": "current_run" in job,
            "current_run_started": job.get("current_run"),
        }

    def reset(self) -> None:
        self._storage.clear()


# Global job tracker instance
job_tracker = JobTracker()


async def run_tracked_job(job_func: Callable[[], Awaitable[Any]], job_name: str) -> None:
    """Run a job once and record its outcome. Failed runs are not retried.

    Raises:
        Exception: Whatever job_func raised, after it has been recorded
    """
    job_tracker.record_job_start(job_name)
    logger.info("Executing %s", job_name)

    try:
        await job_func()
    except Exception as e:
        consecutive_failures = job_tracker.record_job_failure(job_name, str(e))
        logger.error(
            "%s failed",
            job_name,
            extra={"job_name": job_name, "error": str(e), "consecutive_failures": consecutive_failures},
        )
        raise

    job_tracker.record_job_success(job_name)
    logger.info("%s completed successfully", job_name)
