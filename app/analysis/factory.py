from app.analysis.batch_analyzer import BatchAnalyzer
from app.analysis.divergency import DivergencyComparatorFactory, DivergencyDetector
from app.analysis.document_pipeline import DocumentPipeline
from app.analysis.merger import EvidenceMerger
from app.analysis.text_cascade import TextCascade
from app.archive.unpacker import ArchiveUnpacker
from app.config.settings import Settings
from app.extraction.client_base import BaseCompletionClient
from app.extraction.factory import CompletionClientFactory
from app.imaging.preprocessor import ImagePreprocessor
from app.ocr.cascade import OcrExtractor
from app.ocr.factory import OcrEngineFactory
from app.pdf.factory import PdfExtractorFactory


def build_document_pipeline(
    settings: Settings,
    client: BaseCompletionClient,
) -> DocumentPipeline:
    """Wire the per-document extraction chain from settings."""
    renderer = PdfExtractorFactory.create_renderer(settings)
    preprocessor = ImagePreprocessor(
        jpeg_threshold_bytes=settings.vision_jpeg_threshold_bytes
    )
    ocr_extractor = OcrExtractor(
        renderer,
        preprocessor,
        OcrEngineFactory.create(settings),
        language=settings.ocr_language,
        render_scale=settings.ocr_render_scale,
        page_min_confidence=settings.ocr_page_min_confidence,
        min_text_chars=settings.ocr_min_text_chars,
        min_aggregate_confidence=settings.ocr_min_confidence,
    )
    text_cascade = TextCascade(
        PdfExtractorFactory.create(settings),
        ocr_extractor,
        min_text_chars=settings.text_layer_min_chars,
    )
    return DocumentPipeline(
        text_cascade=text_cascade,
        renderer=renderer,
        preprocessor=preprocessor,
        structured_extractor=CompletionClientFactory.create_structured_extractor(
            settings, client
        ),
        vision_extractor=CompletionClientFactory.create_vision_extractor(settings, client),
        merger=EvidenceMerger(),
        vision_render_scale=settings.vision_render_scale,
        confidence_threshold=settings.vision_confidence_threshold,
    )


def build_batch_analyzer(
    settings: Settings,
    client: BaseCompletionClient | None = None,
) -> BatchAnalyzer:
    """Build a BatchAnalyzer with all adapters selected by settings."""
    client = client or CompletionClientFactory.create(settings)
    return BatchAnalyzer(
        unpacker=ArchiveUnpacker(),
        pipeline=build_document_pipeline(settings, client),
        detector=DivergencyDetector(DivergencyComparatorFactory.create(settings, client)),
        failure_policy=settings.document_failure_policy,
    )
