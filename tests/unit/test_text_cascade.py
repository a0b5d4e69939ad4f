"""Tests for the text layer to OCR fallback."""

from unittest.mock import MagicMock

from app.analysis.models import ExtractionAttempt, ExtractionMethod
from app.analysis.text_cascade import TextCascade
from app.ocr.cascade import OcrExtractor
from app.pdf.base import BasePdfExtractor
from app.pdf.exceptions import PdfExtractionError


def _make_cascade(text: str | Exception, ocr: ExtractionAttempt) -> tuple[TextCascade, MagicMock]:
    text_extractor = MagicMock(spec=BasePdfExtractor)
    if isinstance(text, Exception):
        text_extractor.extract.side_effect = text
    else:
        text_extractor.extract.return_value = text
    ocr_extractor = MagicMock(spec=OcrExtractor)
    ocr_extractor.extract.return_value = ocr
    return TextCascade(text_extractor, ocr_extractor), ocr_extractor


OCR_RESULT = ExtractionAttempt(ExtractionMethod.OCR, "texto reconhecido por OCR", 72.0)


class TestTextCascade:
    def test_long_text_layer_is_trusted(self) -> None:
        cascade, ocr = _make_cascade("x" * 51, OCR_RESULT)

        attempt = cascade.extract(b"%PDF")

        assert attempt == ExtractionAttempt(ExtractionMethod.TEXT, "x" * 51, 100.0)
        ocr.extract.assert_not_called()

    def test_text_of_exactly_fifty_chars_falls_back_to_ocr(self) -> None:
        cascade, ocr = _make_cascade("x" * 50, OCR_RESULT)

        assert cascade.extract(b"%PDF") == OCR_RESULT
        ocr.extract.assert_called_once()

    def test_extractor_failure_falls_back_to_ocr(self) -> None:
        cascade, _ocr = _make_cascade(PdfExtractionError("broken xref"), OCR_RESULT)

        assert cascade.extract(b"%PDF").method is ExtractionMethod.OCR

    def test_empty_ocr_gives_method_none(self) -> None:
        cascade, _ocr = _make_cascade(
            "", ExtractionAttempt(ExtractionMethod.OCR, "", 40.0)
        )

        attempt = cascade.extract(b"%PDF")

        assert attempt.method is ExtractionMethod.NONE
        assert attempt.confidence == 0.0
