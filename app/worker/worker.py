import threading

from app.config.settings import Settings
from app.database.connection import get_connection
from app.database.models import JobRecord
from app.database.repositories.job_repository import JobRepository
from app.logging.logger import Log
from app.worker.job_runner import JobRunner


class Worker:
    """Poll loop over analysis_jobs: claim -> dispatch, or wait when idle.

    ``stop()`` may be called from a signal handler or another thread; the loop
    finishes the job in hand and exits before claiming the next one.
    """

    def __init__(
        self,
        job_repo: JobRepository,
        job_runner: JobRunner,
        settings: Settings,
    ) -> None:
        self._job_repo = job_repo
        self._job_runner = job_runner
        self._settings = settings
        self._stopping = threading.Event()

    def stop(self) -> None:
        self._stopping.set()

    def run(self, max_jobs: int | None = None) -> int:
        """Poll until stopped or interrupted and return the number of jobs run.

        If max_jobs is set, stop after processing that many jobs (for testing).
        """
        Log.info("Worker started, polling for analysis jobs")
        jobs_done = 0
        try:
            while not self._stopping.is_set():
                if max_jobs is not None and jobs_done >= max_jobs:
                    break
                job = self._try_claim_job()
                if job is None:
                    Log.debug("No jobs available, waiting")
                    self._stopping.wait(self._settings.job_poll_interval_seconds)
                    continue
                self._run_job(job)
                jobs_done += 1
        except KeyboardInterrupt:
            Log.info("Worker interrupted")
        Log.info(f"Worker shutting down after {jobs_done} jobs")
        return jobs_done

    def _run_job(self, job: JobRecord) -> None:
        """Run one job. Errors while recording its outcome leave the loop alive."""
        try:
            self._job_runner.run(job)
        except Exception as exc:
            Log.error(f"Could not record outcome of job {job.id}: {exc}")

    def _try_claim_job(self) -> JobRecord | None:
        """Attempt to claim the next pending job. Database errors mean "no job"."""
        try:
            with get_connection() as conn:
                return self._job_repo.claim_next_job(conn)
        except Exception as exc:
            Log.warning(f"Database error while claiming a job, will retry: {exc}")
            return None
