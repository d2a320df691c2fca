from abc import ABC, abstractmethod

from adinvoice.classification.platform import Platform
from adinvoice.extraction.models import InvoiceData


class BaseFieldExtractor(ABC):
    """Contract for turning invoice text into structured fields."""

    @abstractmethod
    def extract(self, text: str, platform: Platform) -> InvoiceData:
        """Extract structured invoice fields.

        Args:
            text: Plain text of the invoice PDF.
            platform: Platform inferred from the same text.

        Returns:
            InvoiceData with derived fields reconciled. Never raises for
            provider failures; those fall back to pattern extraction.
        """
