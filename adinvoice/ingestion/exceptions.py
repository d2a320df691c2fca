class IngestionError(Exception):
    """Base exception for batch ingestion errors."""


class BatchValidationError(IngestionError):
    """Raised when a submission is rejected before any processing starts."""


class RunNotFoundError(IngestionError):
    """Raised when a run id does not belong to any known batch."""


class ItemCancelledError(IngestionError):
    """Raised inside an item pipeline when its batch was cancelled before work started."""
