from adinvoice.config.settings import Settings
from adinvoice.database.repositories.base import BaseInvoiceRepository
from adinvoice.database.repositories.invoice_repository import PostgresInvoiceRepository
from adinvoice.database.repositories.memory_repository import InMemoryInvoiceRepository


class InvoiceRepositoryFactory:
    """Creates the invoice store selected by settings.storage_backend."""

    BACKENDS: dict[str, type[BaseInvoiceRepository]] = {
        "postgres": PostgresInvoiceRepository,
        "memory": InMemoryInvoiceRepository,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseInvoiceRepository:
        backend = settings.storage_backend.lower()
        repo_cls = cls.BACKENDS.get(backend)
        if repo_cls is None:
            raise ValueError(
                f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
            )
        return repo_cls()
