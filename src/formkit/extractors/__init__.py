"""Format-specific field extractors.

Subpackage containing one extractor per document kind:
- pdf_fields: PyMuPDF-based AcroForm widget extraction
- word_fields: mammoth raw text + heuristic line parsing
- spreadsheet_fields: openpyxl/xlrd header-row extraction
"""

from formkit.extractors.pdf_fields import PDFFieldExtractor
from formkit.extractors.spreadsheet_fields import SpreadsheetFieldExtractor
from formkit.extractors.word_fields import WordFieldExtractor, infer_fields_from_text

__all__ = [
    "PDFFieldExtractor",
    "SpreadsheetFieldExtractor",
    "WordFieldExtractor",
    "infer_fields_from_text",
]
