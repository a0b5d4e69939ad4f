import io
from statistics import mean

import pytesseract
from PIL import Image
from pytesseract import Output

from app.ocr.base import BaseOcrEngine, OcrPageResult
from app.ocr.exceptions import RecognitionError


class TesseractAdapter(BaseOcrEngine):
    """Recognizes page text with Tesseract via pytesseract.

    ``--oem 3`` selects the LSTM engine, ``--psm 3`` fully automatic page
    segmentation, which suits forms with mixed blocks of text.
    """

    def __init__(self, oem: int = 3, psm: int = 3) -> None:
        self._config = f"--oem {oem} --psm {psm}"

    def recognize(self, image_bytes: bytes, language: str) -> OcrPageResult:
        try:
            with Image.open(io.BytesIO(image_bytes)) as image:
                data = pytesseract.image_to_data(
                    image,
                    lang=language,
                    config=self._config,
                    output_type=Output.DICT,
                )
        except Exception as exc:
            raise RecognitionError(f"tesseract recognition failed: {exc}") from exc

        words: list[str] = []
        confidences: list[float] = []
        for word, conf in zip(data.get("text", []), data.get("conf", [])):
            if not word or not word.strip():
                continue
            try:
                value = float(conf)
            except (TypeError, ValueError):
                continue
            if value < 0:
                continue
            words.append(word.strip())
            confidences.append(value)

        return OcrPageResult(
            text=" ".join(words),
            confidence=mean(confidences) if confidences else 0.0,
        )
