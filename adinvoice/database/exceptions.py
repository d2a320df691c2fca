class StorageError(Exception):
    """Raised when the invoice store cannot complete an operation."""


class RecordNotFoundError(StorageError):
    """Raised when an invoice record does not exist."""
