from app.analysis.batch_analyzer import BatchAnalyzer
from app.analysis.cancellation import CancellationToken
from app.database.repositories.analysis_repository import AnalysisRepository
from app.database.repositories.job_repository import JobRepository
from app.logging.logger import Log
from app.processor.file_loader import FileLoader
from app.processor.pipeline import PipelineContext, PipelineStep


class LoadArchiveStep(PipelineStep):
    def __init__(self, file_loader: FileLoader) -> None:
        self._file_loader = file_loader

    def run(self, context: PipelineContext) -> PipelineContext:
        context.archive_bytes = self._file_loader.load(context.archive_uuid)
        Log.info(
            f"Loaded {len(context.archive_bytes)} bytes for archive {context.archive_uuid}"
        )
        return context


class AnalyzeArchiveStep(PipelineStep):
    def __init__(
        self,
        batch_analyzer: BatchAnalyzer,
        timeout_seconds: float | None = None,
    ) -> None:
        self._batch_analyzer = batch_analyzer
        self._timeout_seconds = timeout_seconds

    def run(self, context: PipelineContext) -> PipelineContext:
        cancel = CancellationToken(timeout_seconds=self._timeout_seconds)
        context.report = self._batch_analyzer.analyze(context.archive_bytes, cancel)
        Log.info(
            f"Archive {context.archive_uuid} analyzed: {context.report.status.value}",
            report_message=context.report.message,
        )
        return context


class PersistReportStep(PipelineStep):
    def __init__(
        self,
        analysis_repo: AnalysisRepository,
        job_repo: JobRepository,
    ) -> None:
        self._analysis_repo = analysis_repo
        self._job_repo = job_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.report is None:
            raise ValueError("PipelineContext.report must be set before persist")
        context.analysis_id = self._analysis_repo.save(context.report)
        self._job_repo.attach_analysis(context.job_id, context.analysis_id)
        Log.info(f"Stored analysis {context.analysis_id} for job {context.job_id}")
        return context
