class ArchiveError(Exception):
    """Raised when the uploaded archive cannot be read."""
