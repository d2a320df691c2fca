from abc import ABC, abstractmethod
from collections.abc import Iterable


class BasePdfExtractor(ABC):
    """Turns the bytes of an invoice PDF into plain text."""

    @abstractmethod
    def extract(self, pdf_bytes: bytes) -> str:
        """Return the text of every page, in page order.

        Raises:
            UnreadablePdfError: if the bytes are empty or not a parseable PDF.
        """


def join_pages(pages: Iterable[str]) -> str:
    """Join page texts with newlines.

    NUL characters are dropped: some generators embed them in text runs and
    they cannot be stored in a Postgres TEXT column.
    """
    return "\n".join(pages).replace("\x00", "").strip()
