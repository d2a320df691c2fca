from adinvoice.config.settings import Settings
from adinvoice.logging.logger import Log
from adinvoice.pdf.base import BasePdfExtractor
from adinvoice.pdf.pdfplumber_adapter import PdfPlumberAdapter
from adinvoice.pdf.pymupdf_adapter import PyMuPdfAdapter


class PdfExtractorFactory:
    """Maps settings.pdf_engine to a text extractor."""

    ENGINES: dict[str, type[BasePdfExtractor]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePdfExtractor:
        engine = settings.pdf_engine.strip().lower()
        try:
            extractor_cls = cls.ENGINES[engine]
        except KeyError:
            raise ValueError(
                f"Unknown PDF engine '{settings.pdf_engine}'. Supported: {sorted(cls.ENGINES)}"
            ) from None
        Log.debug(f"Using {engine} for PDF text extraction")
        return extractor_cls()
