class UnreadablePdfError(Exception):
    """Raised when text cannot be extracted from a PDF byte stream."""
