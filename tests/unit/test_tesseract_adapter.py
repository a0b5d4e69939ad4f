from collections.abc import Callable
from unittest.mock import MagicMock, patch

import pytest

from app.analysis.models import RenderedPage
from app.ocr.exceptions import RecognitionError
from app.ocr.factory import OcrEngineFactory
from app.ocr.tesseract_adapter import TesseractAdapter

_TARGET = "app.ocr.tesseract_adapter.pytesseract.image_to_data"


class TestTesseractAdapter:
    def test_joins_words_and_averages_confidence(
        self, make_page: Callable[..., RenderedPage]
    ) -> None:
        data = {
            "text": ["", "CPF:", "111.222.333-44", "  ", "Placa"],
            "conf": ["-1", "90", "80.5", "-1", 70],
        }
        with patch(_TARGET, return_value=data) as mock_call:
            result = TesseractAdapter().recognize(make_page().image_bytes, "por")

        assert result.text == "CPF: 111.222.333-44 Placa"
        assert result.confidence == pytest.approx((90 + 80.5 + 70) / 3)
        assert mock_call.call_args.kwargs["lang"] == "por"
        assert mock_call.call_args.kwargs["config"] == "--oem 3 --psm 3"

    def test_no_words_gives_zero_confidence(self, make_page: Callable[..., RenderedPage]) -> None:
        with patch(_TARGET, return_value={"text": ["", " "], "conf": ["-1", "-1"]}):
            result = TesseractAdapter().recognize(make_page().image_bytes, "por")

        assert result.text == ""
        assert result.confidence == 0.0

    def test_engine_failure_raises_recognition_error(
        self, make_page: Callable[..., RenderedPage]
    ) -> None:
        with (
            patch(_TARGET, side_effect=RuntimeError("tesseract not installed")),
            pytest.raises(RecognitionError, match="tesseract not installed"),
        ):
            TesseractAdapter().recognize(make_page().image_bytes, "por")

    def test_undecodable_image_raises_recognition_error(self) -> None:
        with pytest.raises(RecognitionError):
            TesseractAdapter().recognize(b"garbage", "por")


class TestOcrEngineFactory:
    def test_creates_tesseract(self) -> None:
        settings = MagicMock(ocr_engine="Tesseract")
        assert isinstance(OcrEngineFactory.create(settings), TesseractAdapter)

    def test_unknown_engine(self) -> None:
        settings = MagicMock(ocr_engine="paddle")
        with pytest.raises(ValueError, match="Unknown OCR engine"):
            OcrEngineFactory.create(settings)
