import io

import pdfplumber

from adinvoice.pdf.base import BasePdfExtractor, join_pages
from adinvoice.pdf.exceptions import UnreadablePdfError


class PdfPlumberAdapter(BasePdfExtractor):
    """Default engine. Keeps table rows such as campaign lines on one line."""

    def extract(self, pdf_bytes: bytes) -> str:
        if not pdf_bytes:
            raise UnreadablePdfError("PDF file is empty")
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                return join_pages(page.extract_text() or "" for page in pdf.pages)
        except Exception as exc:
            raise UnreadablePdfError(f"pdfplumber could not read PDF: {exc}") from exc
