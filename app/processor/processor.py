from collections.abc import Sequence
from pathlib import Path

from app.analysis.factory import build_batch_analyzer
from app.config.settings import Settings
from app.database.repositories.analysis_repository import AnalysisRepository
from app.database.repositories.job_repository import JobRepository
from app.logging.logger import Log
from app.processor.file_loader import FileLoader
from app.processor.pipeline import PipelineContext, PipelineStep
from app.processor.steps import AnalyzeArchiveStep, LoadArchiveStep, PersistReportStep


class Processor:
    """Runs the job-level steps for one uploaded archive.

    Pipeline: load archive -> analyze -> persist report.
    """

    def __init__(self, steps: Sequence[PipelineStep]) -> None:
        self._steps = list(steps)

    def process(self, archive_uuid: str, job_id: int) -> PipelineContext:
        """Run every step in order. A failing step aborts the job and re-raises."""
        Log.info(f"Processing archive {archive_uuid} for job {job_id}")
        context = PipelineContext(archive_uuid=archive_uuid, job_id=job_id)
        for step in self._steps:
            try:
                context = step.run(context)
            except Exception as exc:
                Log.error(f"Step {type(step).__name__} failed for job {job_id}: {exc}")
                raise
        return context


def build_processor(
    settings: Settings,
    job_repo: JobRepository,
    files_root: Path | None = None,
) -> Processor:
    """Build a Processor with all required adapters."""
    file_loader = FileLoader(
        files_root=files_root if files_root is not None else settings.files_root
    )
    return Processor(
        steps=[
            LoadArchiveStep(file_loader),
            AnalyzeArchiveStep(
                build_batch_analyzer(settings),
                timeout_seconds=settings.batch_timeout_seconds,
            ),
            PersistReportStep(AnalysisRepository(), job_repo),
        ]
    )
