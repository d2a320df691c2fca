class ExtractionError(Exception):
    """Raised when the generative extraction tier cannot produce a result."""


class ExtractionResponseError(ExtractionError):
    """Raised when the AI response is not valid JSON or violates the invoice schema."""


class ExtractionServiceError(ExtractionError):
    """Raised when the AI provider call fails due to network, quota or timeout issues."""
