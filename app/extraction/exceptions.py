class ExternalServiceError(Exception):
    """Raised when a completion service returns an empty or malformed response."""


class ExternalServiceNetworkError(ExternalServiceError):
    """Raised when the completion provider call fails due to network/infrastructure issues."""


class PromptTemplateError(Exception):
    """Raised when a bundled prompt template cannot be loaded."""
