"""Per-document escalation as an explicit finite-state machine.

    TEXT_ATTEMPT -> DECIDE -+-> TEXT_PATH   -> DONE
                            +-> VISION_PATH -> DONE

TEXT_ATTEMPT runs the text layer / OCR cascade. DECIDE escalates to vision
when the cascade produced no text or its confidence is under the threshold.
Both paths are terminal for the document. Page-level failures on the vision
path are absorbed; anything else propagates to the batch boundary.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from app.analysis.cancellation import CancellationToken
from app.analysis.merger import EvidenceMerger
from app.analysis.models import (
    Document,
    ExtractedFields,
    ExtractionAttempt,
    ExtractionMethod,
    PageExtraction,
    Record,
)
from app.analysis.text_cascade import TextCascade
from app.extraction.exceptions import ExternalServiceError
from app.extraction.structured_extractor import StructuredDataExtractor
from app.extraction.vision_extractor import VisionExtractor
from app.imaging.preprocessor import ImagePreprocessor
from app.logging.logger import Log
from app.ocr.exceptions import RecognitionError
from app.pdf.renderer import PageRenderer

VISION_RENDER_SCALE = 2.0
CONFIDENCE_THRESHOLD = 80.0


class PipelineState(str, Enum):
    TEXT_ATTEMPT = "text_attempt"
    DECIDE = "decide"
    TEXT_PATH = "text_path"
    VISION_PATH = "vision_path"
    DONE = "done"


def has_no_text(attempt: ExtractionAttempt) -> bool:
    return len(attempt.text) == 0


def is_low_confidence(attempt: ExtractionAttempt, threshold: float) -> bool:
    return attempt.confidence < threshold


@dataclass
class DocumentRun:
    """Mutable state of one document while it moves through the machine."""

    document: Document
    cancel: CancellationToken
    attempt: ExtractionAttempt = field(default_factory=ExtractionAttempt.empty)
    fields: ExtractedFields = field(default_factory=ExtractedFields)
    method: ExtractionMethod = ExtractionMethod.NONE
    confidence: float = 0.0
    pages_queried: int = 0
    pages_failed: int = 0
    trail: list[PipelineState] = field(default_factory=list)

    def to_record(self, elapsed_ms: int) -> Record:
        return Record(
            file_name=self.document.file_name,
            personal_fields=dict(self.fields.personal_fields),
            vehicle_fields=dict(self.fields.vehicle_fields),
            extraction_method=self.method,
            text_length=len(self.attempt.text),
            confidence=self.confidence,
            elapsed_ms=elapsed_ms,
        )


class DocumentPipeline:
    """Runs one document through text, OCR and vision extraction."""

    def __init__(
        self,
        *,
        text_cascade: TextCascade,
        renderer: PageRenderer,
        preprocessor: ImagePreprocessor,
        structured_extractor: StructuredDataExtractor,
        vision_extractor: VisionExtractor,
        merger: EvidenceMerger,
        vision_render_scale: float = VISION_RENDER_SCALE,
        confidence_threshold: float = CONFIDENCE_THRESHOLD,
    ) -> None:
        self._text_cascade = text_cascade
        self._renderer = renderer
        self._preprocessor = preprocessor
        self._structured_extractor = structured_extractor
        self._vision_extractor = vision_extractor
        self._merger = merger
        self._vision_render_scale = vision_render_scale
        self._confidence_threshold = confidence_threshold
        self._handlers: dict[PipelineState, Callable[[DocumentRun], PipelineState]] = {
            PipelineState.TEXT_ATTEMPT: self._attempt_text,
            PipelineState.DECIDE: self._decide,
            PipelineState.TEXT_PATH: self._text_path,
            PipelineState.VISION_PATH: self._vision_path,
        }

    def run(self, document: Document, cancel: CancellationToken | None = None) -> Record:
        started = time.perf_counter()
        run = self.execute(document, cancel)
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        record = run.to_record(elapsed_ms)
        Log.info(
            f"Document done via {' -> '.join(state.value for state in run.trail)}",
            file=document.file_name,
            method=record.extraction_method.value,
            has_data=record.has_data,
            elapsed_ms=elapsed_ms,
        )
        return record

    def execute(
        self,
        document: Document,
        cancel: CancellationToken | None = None,
    ) -> DocumentRun:
        """Drive the state machine to DONE and return the final run state."""
        run = DocumentRun(document=document, cancel=cancel or CancellationToken())
        state = PipelineState.TEXT_ATTEMPT
        while state is not PipelineState.DONE:
            run.trail.append(state)
            run.cancel.raise_if_cancelled(f"{state.value} of {document.file_name}")
            state = self._handlers[state](run)
        run.trail.append(PipelineState.DONE)
        return run

    def _attempt_text(self, run: DocumentRun) -> PipelineState:
        run.attempt = self._text_cascade.extract(run.document.raw_bytes, run.cancel)
        Log.info(
            f"Text extraction: {len(run.attempt.text)} chars",
            file=run.document.file_name,
            method=run.attempt.method.value,
            confidence=f"{run.attempt.confidence:.1f}",
        )
        return PipelineState.DECIDE

    def _decide(self, run: DocumentRun) -> PipelineState:
        if has_no_text(run.attempt):
            Log.info("No usable text, escalating to vision", file=run.document.file_name)
            return PipelineState.VISION_PATH
        if is_low_confidence(run.attempt, self._confidence_threshold):
            Log.info(
                f"Low confidence ({run.attempt.confidence:.1f}% < "
                f"{self._confidence_threshold:.0f}%), escalating to vision",
                file=run.document.file_name,
            )
            return PipelineState.VISION_PATH
        return PipelineState.TEXT_PATH

    def _text_path(self, run: DocumentRun) -> PipelineState:
        run.fields = self._structured_extractor.extract_from_text(
            run.attempt.text, run.document.file_name
        )
        run.method = run.attempt.method
        run.confidence = run.attempt.confidence
        return PipelineState.DONE

    def _vision_path(self, run: DocumentRun) -> PipelineState:
        file_name = run.document.file_name
        pages = self._renderer.render(run.document.raw_bytes, scale=self._vision_render_scale)

        extractions: list[PageExtraction] = []
        for page in pages:
            run.cancel.raise_if_cancelled(f"vision page {page.page_number} of {file_name}")
            prepared = self._preprocessor.for_vision(page)
            run.pages_queried += 1
            try:
                extraction = self._vision_extractor.extract_from_image(
                    prepared.image_bytes,
                    file_name,
                    prepared.page_number,
                    mime_type=prepared.mime_type,
                )
            except (ExternalServiceError, RecognitionError) as exc:
                run.pages_failed += 1
                Log.warning(
                    f"Vision extraction failed: {exc}",
                    file=file_name,
                    page=page.page_number,
                )
                continue
            extractions.append(extraction)

        run.fields = self._merger.merge(extractions)
        run.method = ExtractionMethod.VISION
        run.confidence = 100.0
        Log.info(
            f"Vision merged {len(extractions)}/{run.pages_queried} pages",
            file=file_name,
        )
        return PipelineState.DONE
