from abc import ABC, abstractmethod


class BasePdfExtractor(ABC):
    """Contract for all embedded text layer adapters."""

    @abstractmethod
    def extract(self, pdf_bytes: bytes) -> str:
        """Extract the embedded text layer from PDF bytes.

        Args:
            pdf_bytes: Raw PDF file content.

        Returns:
            Whitespace-normalized text, empty for image-only documents.

        Raises:
            PdfExtractionError: if the PDF cannot be parsed.
        """
