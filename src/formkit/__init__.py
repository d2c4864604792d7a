"""formkit -- Form field extraction from PDF, Word and spreadsheet documents.

Public API exports for classification, extraction, normalization, preview
handles, autofill and the reference stores.
"""

from formkit.autofill import apply_profile, match_profile
from formkit.classifier import SUPPORTED_EXTENSIONS, classify, extension_of
from formkit.config import FormKitConfig
from formkit.errors import (
    DocumentParseError,
    ErrorCode,
    ExtractionTimeoutError,
    FormKitError,
    FormKitException,
    UnsupportedFileTypeError,
)
from formkit.extractors import (
    PDFFieldExtractor,
    SpreadsheetFieldExtractor,
    WordFieldExtractor,
    infer_fields_from_text,
)
from formkit.models import (
    AutofillProfile,
    BatchItemResult,
    DocumentInput,
    DocumentKind,
    DocumentMetadata,
    ExtractedField,
    ExtractionOutput,
    FieldPosition,
    FieldType,
    FieldValidation,
    Form,
    FormStatus,
    ProcessedDocument,
    ProfileField,
    RawField,
)
from formkit.normalizer import field_id_from_label, normalize_fields
from formkit.preview import PreviewHandle, PreviewStore
from formkit.protocols import DocumentExtractor, FormStore, ProfileStore
from formkit.router import DocumentRouter, create_default_router
from formkit.security import UploadValidator
from formkit.stores import FileSystemFormStore, FileSystemProfileStore

__all__: list[str] = [
    # Errors and config
    "ErrorCode",
    "FormKitError",
    "FormKitException",
    "UnsupportedFileTypeError",
    "DocumentParseError",
    "ExtractionTimeoutError",
    "FormKitConfig",
    # Enums
    "DocumentKind",
    "FieldType",
    "FormStatus",
    # Models
    "FieldValidation",
    "FieldPosition",
    "RawField",
    "ExtractedField",
    "ExtractionOutput",
    "DocumentMetadata",
    "ProcessedDocument",
    "DocumentInput",
    "BatchItemResult",
    "Form",
    "ProfileField",
    "AutofillProfile",
    # Protocols
    "DocumentExtractor",
    "FormStore",
    "ProfileStore",
    # Classification and normalization
    "SUPPORTED_EXTENSIONS",
    "classify",
    "extension_of",
    "field_id_from_label",
    "normalize_fields",
    # Extractors
    "PDFFieldExtractor",
    "WordFieldExtractor",
    "SpreadsheetFieldExtractor",
    "infer_fields_from_text",
    # Preview
    "PreviewHandle",
    "PreviewStore",
    # Router
    "DocumentRouter",
    "create_default_router",
    # Upload guard
    "UploadValidator",
    # Autofill
    "match_profile",
    "apply_profile",
    # Stores
    "FileSystemFormStore",
    "FileSystemProfileStore",
]
