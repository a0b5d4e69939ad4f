"""OCR over rendered pages with per-page and aggregate confidence gates."""

from statistics import mean

from app.analysis.cancellation import CancellationToken
from app.analysis.models import ExtractionAttempt, ExtractionMethod
from app.imaging.preprocessor import ImagePreprocessor
from app.logging.logger import Log
from app.ocr.base import BaseOcrEngine
from app.ocr.exceptions import RecognitionError
from app.pdf.exceptions import RenderError
from app.pdf.renderer import PageRenderer
from app.pdf.text import sanitize_text

OCR_RENDER_SCALE = 1.5
PAGE_MIN_CONFIDENCE = 50.0
MIN_TEXT_CHARS = 20
MIN_AGGREGATE_CONFIDENCE = 60.0


class OcrExtractor:
    """Renders a PDF, enhances each page and aggregates accepted OCR text.

    A page is accepted only with non-empty text and confidence strictly above
    ``page_min_confidence``. The aggregate confidence is the mean over accepted
    pages. Short text with low aggregate confidence is discarded so the caller
    escalates to vision instead of trusting it.
    """

    def __init__(
        self,
        renderer: PageRenderer,
        preprocessor: ImagePreprocessor,
        engine: BaseOcrEngine,
        *,
        language: str = "por",
        render_scale: float = OCR_RENDER_SCALE,
        page_min_confidence: float = PAGE_MIN_CONFIDENCE,
        min_text_chars: int = MIN_TEXT_CHARS,
        min_aggregate_confidence: float = MIN_AGGREGATE_CONFIDENCE,
    ) -> None:
        self._renderer = renderer
        self._preprocessor = preprocessor
        self._engine = engine
        self._language = language
        self._render_scale = render_scale
        self._page_min_confidence = page_min_confidence
        self._min_text_chars = min_text_chars
        self._min_aggregate_confidence = min_aggregate_confidence

    def extract(
        self,
        pdf_bytes: bytes,
        cancel: CancellationToken | None = None,
    ) -> ExtractionAttempt:
        cancel = cancel or CancellationToken()
        cancel.raise_if_cancelled("OCR rendering")
        try:
            pages = self._renderer.render(pdf_bytes, scale=self._render_scale)
        except RenderError as exc:
            Log.warning(f"OCR skipped, no renderable pages: {exc}")
            return ExtractionAttempt.empty()

        accepted_text: list[str] = []
        accepted_confidences: list[float] = []
        skipped = 0
        for page in pages:
            cancel.raise_if_cancelled(f"OCR of page {page.page_number}")
            prepared = self._preprocessor.for_ocr(page)
            try:
                result = self._engine.recognize(prepared.image_bytes, self._language)
            except RecognitionError as exc:
                Log.warning(f"OCR failed: {exc}", page=page.page_number)
                skipped += 1
                continue

            text = result.text.strip()
            if text and result.confidence > self._page_min_confidence:
                accepted_text.append(text)
                accepted_confidences.append(result.confidence)
                Log.info(
                    f"OCR accepted {len(text)} chars",
                    page=page.page_number,
                    confidence=f"{result.confidence:.1f}",
                )
            else:
                skipped += 1
                Log.info(
                    "OCR page skipped",
                    page=page.page_number,
                    chars=len(text),
                    confidence=f"{result.confidence:.1f}",
                )

        text = sanitize_text("\n".join(accepted_text))
        confidence = mean(accepted_confidences) if accepted_confidences else 0.0
        Log.info(
            f"OCR aggregate: {len(text)} chars from {len(accepted_text)} pages "
            f"({skipped} skipped)",
            confidence=f"{confidence:.1f}",
        )

        if len(text) < self._min_text_chars and confidence < self._min_aggregate_confidence:
            Log.info("OCR result too poor, discarding to force vision")
            return ExtractionAttempt(method=ExtractionMethod.OCR, text="", confidence=confidence)

        return ExtractionAttempt(method=ExtractionMethod.OCR, text=text, confidence=confidence)
