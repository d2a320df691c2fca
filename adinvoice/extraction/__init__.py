from adinvoice.extraction.base import BaseFieldExtractor
from adinvoice.extraction.extractor import FieldExtractor
from adinvoice.extraction.factory import FieldExtractorFactory

__all__ = ["BaseFieldExtractor", "FieldExtractor", "FieldExtractorFactory"]
