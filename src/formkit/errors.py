"""Normalized error codes and structured error model for the formkit pipeline.

``ErrorCode`` lists every error and warning the extraction pipeline, the
upload guard and the reference stores can report.  ``FormKitError`` is the
Pydantic data model; ``FormKitException`` and its subclasses are the raisable
wrappers used in control flow.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Error codes for formkit.

    Values equal their names so they are stable strings suitable for
    metrics and alerting.  ``E_`` prefix = fatal, ``W_`` prefix = warning.
    """

    # Classification
    E_UNSUPPORTED_FILE_TYPE = "E_UNSUPPORTED_FILE_TYPE"

    # Parse
    E_PARSE_CORRUPT = "E_PARSE_CORRUPT"
    E_PDF_NO_FORM = "E_PDF_NO_FORM"
    E_EXTRACTION_TIMEOUT = "E_EXTRACTION_TIMEOUT"

    # Upload guard
    E_UPLOAD_BAD_EXTENSION = "E_UPLOAD_BAD_EXTENSION"
    E_UPLOAD_TOO_LARGE = "E_UPLOAD_TOO_LARGE"
    E_UPLOAD_EMPTY = "E_UPLOAD_EMPTY"

    # Stores
    E_STORE_NOT_FOUND = "E_STORE_NOT_FOUND"
    E_STORE_CONFLICT = "E_STORE_CONFLICT"

    # Warnings (non-fatal)
    W_EMPTY_RESULT = "W_EMPTY_RESULT"
    W_PDF_NO_FORM = "W_PDF_NO_FORM"
    W_WORD_CONVERTER_MESSAGES = "W_WORD_CONVERTER_MESSAGES"
    W_FALLBACK_FIELDS_USED = "W_FALLBACK_FIELDS_USED"


class FormKitError(BaseModel):
    """Structured error with code, message, and document context.

    Note: This is a Pydantic model (data structure), not a Python Exception.
    Non-fatal warnings travel on ``ProcessedDocument.warnings`` as instances
    of this model; fatal errors are raised as ``FormKitException``.
    """

    code: ErrorCode
    message: str
    stage: str | None = None
    recoverable: bool = False
    file_name: str | None = None
    field_id: str | None = None


class FormKitException(Exception):
    """Raisable exception wrapping a FormKitError data model.

    Carries the structured ``FormKitError`` as the ``.error`` attribute
    for inspection and serialization.  Subclasses pin a default ``code``
    so callers can catch by type or inspect by code.
    """

    default_code: ErrorCode | None = None

    def __init__(self, **kwargs: object) -> None:
        if "code" not in kwargs and self.default_code is not None:
            kwargs["code"] = self.default_code
        self.error = FormKitError(**kwargs)  # type: ignore[arg-type]
        super().__init__(self.error.message)

    @property
    def code(self) -> ErrorCode:
        return self.error.code

    @property
    def message(self) -> str:
        return self.error.message

    @property
    def stage(self) -> str | None:
        return self.error.stage

    @property
    def recoverable(self) -> bool:
        return self.error.recoverable


class UnsupportedFileTypeError(FormKitException):
    """The file extension is not one of the recognized document kinds."""

    default_code = ErrorCode.E_UNSUPPORTED_FILE_TYPE

    user_message = "Please upload a PDF, XLSX, or DOCX file."


class DocumentParseError(FormKitException):
    """The bytes could not be interpreted as a valid instance of their format."""

    default_code = ErrorCode.E_PARSE_CORRUPT


class ExtractionTimeoutError(FormKitException):
    """Extraction exceeded ``per_document_timeout_seconds``."""

    default_code = ErrorCode.E_EXTRACTION_TIMEOUT
