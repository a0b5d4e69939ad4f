from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class OcrPageResult:
    """Text recognized on one page image and the engine's mean confidence (0-100)."""

    text: str
    confidence: float


class BaseOcrEngine(ABC):
    """Contract for all OCR engine adapters."""

    @abstractmethod
    def recognize(self, image_bytes: bytes, language: str) -> OcrPageResult:
        """Run character recognition over an encoded page image.

        Raises:
            RecognitionError: if the engine cannot process the image.
        """
