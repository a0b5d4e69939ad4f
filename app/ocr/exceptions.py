class RecognitionError(Exception):
    """Raised when the OCR engine fails on a page image."""
