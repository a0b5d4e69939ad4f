class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class FileReadError(ProcessorError):
    """Raised when an uploaded archive cannot be read from disk."""
