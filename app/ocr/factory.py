from app.config.settings import Settings
from app.ocr.base import BaseOcrEngine
from app.ocr.tesseract_adapter import TesseractAdapter


class OcrEngineFactory:
    """Creates the configured OCR engine adapter."""

    ADAPTERS: dict[str, type[BaseOcrEngine]] = {
        "tesseract": TesseractAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseOcrEngine:
        engine = settings.ocr_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown OCR engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()
