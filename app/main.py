import signal
from types import FrameType

from app.config.settings import Settings
from app.database.connection import close_pool, init_pool
from app.database.repositories.job_repository import JobRepository
from app.logging.logger import Log
from app.processor.processor import build_processor
from app.worker.job_runner import JobRunner
from app.worker.worker import Worker


def main() -> None:
    """Entry point: initialize pool -> build dependencies -> start worker loop."""
    settings = Settings()
    Log.configure(settings.log_level)
    Log.info(f"Starting document validator worker ({settings.app_env})")
    init_pool(settings)

    try:
        job_repo = JobRepository(settings.max_job_attempts)
        processor = build_processor(settings, job_repo)
        job_runner = JobRunner(processor, job_repo, settings)
        worker = Worker(job_repo, job_runner, settings)

        def _stop(signum: int, _frame: FrameType | None) -> None:
            Log.info(f"Received signal {signum}, stopping after the current job")
            worker.stop()

        signal.signal(signal.SIGTERM, _stop)
        worker.run()
    finally:
        close_pool()


if __name__ == "__main__":
    main()
