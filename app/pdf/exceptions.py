class PdfExtractionError(Exception):
    """Raised when the embedded text layer cannot be read."""


class RenderError(Exception):
    """Raised when a PDF yields no usable page images."""
