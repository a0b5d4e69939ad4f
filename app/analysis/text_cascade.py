from app.analysis.cancellation import CancellationToken
from app.analysis.models import ExtractionAttempt, ExtractionMethod
from app.logging.logger import Log
from app.ocr.cascade import OcrExtractor
from app.pdf.base import BasePdfExtractor
from app.pdf.exceptions import PdfExtractionError

TEXT_LAYER_MIN_CHARS = 50


class TextCascade:
    """Embedded text first, OCR when the text layer is missing, short or broken.

    The embedded text layer is exact, so when it is long enough it is
    returned with confidence 100 and OCR never runs.
    """

    def __init__(
        self,
        text_extractor: BasePdfExtractor,
        ocr_extractor: OcrExtractor,
        min_text_chars: int = TEXT_LAYER_MIN_CHARS,
    ) -> None:
        self._text_extractor = text_extractor
        self._ocr_extractor = ocr_extractor
        self._min_text_chars = min_text_chars

    def extract(
        self,
        pdf_bytes: bytes,
        cancel: CancellationToken | None = None,
    ) -> ExtractionAttempt:
        try:
            text = self._text_extractor.extract(pdf_bytes)
        except PdfExtractionError as exc:
            Log.warning(f"Text layer extraction failed, trying OCR: {exc}")
        else:
            Log.info(f"Text layer: {len(text)} chars")
            if len(text) > self._min_text_chars:
                return ExtractionAttempt(
                    method=ExtractionMethod.TEXT, text=text, confidence=100.0
                )
            Log.info("Text layer too short or empty, trying OCR")

        attempt = self._ocr_extractor.extract(pdf_bytes, cancel)
        if not attempt.text:
            return ExtractionAttempt.empty()
        return attempt
