from app.config.settings import Settings
from app.database.models import JobRecord
from app.database.repositories.job_repository import JobRepository
from app.logging.logger import Log
from app.processor.processor import Processor


class JobRunner:
    """Runs one analysis job and applies the retry rule on infrastructure failures.

    Analysis outcomes, including ``error`` reports, are results: the job is done
    once its report is stored. Only exceptions escaping the processor (missing
    archive, database trouble) count as a failed attempt.
    """

    def __init__(
        self,
        processor: Processor,
        job_repo: JobRepository,
        settings: Settings,
    ) -> None:
        self._processor = processor
        self._job_repo = job_repo
        self._settings = settings

    def run(self, job: JobRecord) -> None:
        attempt = job.attempts + 1
        Log.info(f"Running job {job.id} for archive {job.archive_uuid} (attempt {attempt})")
        try:
            context = self._processor.process(job.archive_uuid, job.id)
            self._job_repo.mark_done(job.id)
        except Exception as exc:
            self._handle_failure(job, exc)
            return
        status = context.report.status.value if context.report else "unknown"
        Log.info(f"Job {job.id} done: analysis {context.analysis_id} ({status})")

    def _handle_failure(self, job: JobRecord, exc: Exception) -> None:
        attempt = job.attempts + 1
        Log.error(f"Job {job.id} failed on attempt {attempt}: {exc}")
        if attempt >= self._settings.max_job_attempts:
            self._job_repo.mark_failed(job.id, str(exc))
            Log.error(f"Job {job.id} permanently failed after {attempt} attempts")
        else:
            self._job_repo.increment_attempts(job.id)
            Log.warning(f"Job {job.id} returned to queue for attempt {attempt + 1}")
