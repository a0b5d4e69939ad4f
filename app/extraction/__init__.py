from app.extraction.client_base import BaseCompletionClient, ImageInput
from app.extraction.factory import CompletionClientFactory
from app.extraction.structured_extractor import StructuredDataExtractor
from app.extraction.vision_extractor import VisionExtractor

__all__ = [
    "BaseCompletionClient",
    "CompletionClientFactory",
    "ImageInput",
    "StructuredDataExtractor",
    "VisionExtractor",
]
