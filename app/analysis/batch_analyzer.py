"""Archive-level driver: unpack, run every document, compare, report."""

import time

from app.analysis.cancellation import CancellationToken
from app.analysis.divergency import DivergencyDetector
from app.analysis.document_pipeline import DocumentPipeline
from app.analysis.exceptions import AnalysisCancelledError
from app.analysis.models import BatchReport, BatchStatus, Record
from app.archive.exceptions import ArchiveError
from app.archive.unpacker import ArchiveUnpacker
from app.extraction.exceptions import ExternalServiceError
from app.logging.logger import Log

ISOLATE = "isolate"
ABORT_BATCH = "abort_batch"
FAILURE_POLICIES = (ISOLATE, ABORT_BATCH)


class BatchAnalyzer:
    """Analyzes one uploaded archive strictly sequentially.

    With the ``isolate`` policy a failing document becomes a failed Record and
    the batch continues. With ``abort_batch`` the first document failure turns
    the whole batch into an error report.
    """

    def __init__(
        self,
        *,
        unpacker: ArchiveUnpacker,
        pipeline: DocumentPipeline,
        detector: DivergencyDetector,
        failure_policy: str = ISOLATE,
    ) -> None:
        if failure_policy not in FAILURE_POLICIES:
            raise ValueError(
                f"Unknown document failure policy '{failure_policy}'. "
                f"Choose from: {list(FAILURE_POLICIES)}"
            )
        self._unpacker = unpacker
        self._pipeline = pipeline
        self._detector = detector
        self._failure_policy = failure_policy

    def analyze(
        self,
        zip_bytes: bytes,
        cancel: CancellationToken | None = None,
    ) -> BatchReport:
        cancel = cancel or CancellationToken()
        Log.info(f"Starting archive analysis: {len(zip_bytes)} bytes")
        try:
            documents = self._unpacker.unpack(zip_bytes)
        except ArchiveError as exc:
            Log.error(f"Archive rejected: {exc}")
            return BatchReport.error(f"Could not read archive: {exc}")
        if not documents:
            return BatchReport.error("No PDF files found in the archive")

        records: list[Record] = []
        try:
            for document in documents:
                cancel.raise_if_cancelled(f"document {document.file_name}")
                started = time.perf_counter()
                try:
                    record = self._pipeline.run(document, cancel)
                except AnalysisCancelledError:
                    raise
                except Exception as exc:
                    elapsed_ms = int((time.perf_counter() - started) * 1000)
                    Log.error(
                        f"Error processing document: {exc}",
                        file=document.file_name,
                        elapsed_ms=elapsed_ms,
                    )
                    if self._failure_policy == ABORT_BATCH:
                        return BatchReport.error(
                            f"Error processing file {document.file_name}: {exc}"
                        )
                    record = Record.failed(document.file_name, str(exc), elapsed_ms=elapsed_ms)
                records.append(record)
        except AnalysisCancelledError as exc:
            Log.warning(f"Batch cancelled after {len(records)} documents: {exc}")
            return BatchReport.error(str(exc))

        succeeded = [record for record in records if record.succeeded]
        if not succeeded:
            details = "; ".join(f"{r.file_name}: {r.error}" for r in records)
            return BatchReport.error(f"No document could be processed ({details})")

        try:
            divergencies = self._detector.compare(succeeded)
        except ExternalServiceError as exc:
            Log.error(f"Divergency comparison failed: {exc}")
            return BatchReport.error(f"Divergency comparison failed: {exc}")

        message = f"Documents analyzed: {len(documents)}."
        if divergencies:
            status = BatchStatus.DIVERGENCIES
            message += f" Divergencies found: {len(divergencies)}."
        else:
            status = BatchStatus.OK
            message += " All documents are consistent."

        for divergency in divergencies:
            Log.info(
                f"Divergency {divergency.kind.value} on '{divergency.field.value}': "
                f"{divergency.values_by_file}"
            )
        Log.info(f"Analysis complete: {status.value}", divergencies=len(divergencies))
        return BatchReport(
            status=status,
            message=message,
            records=records,
            divergencies=divergencies,
        )
