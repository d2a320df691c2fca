import pymupdf

from adinvoice.pdf.base import BasePdfExtractor, join_pages
from adinvoice.pdf.exceptions import UnreadablePdfError


class PyMuPdfAdapter(BasePdfExtractor):
    """Faster engine for large batches of simple single-column invoices."""

    def extract(self, pdf_bytes: bytes) -> str:
        if not pdf_bytes:
            raise UnreadablePdfError("PDF file is empty")
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                return join_pages(page.get_text() for page in doc)
        except Exception as exc:
            raise UnreadablePdfError(f"pymupdf could not read PDF: {exc}") from exc
