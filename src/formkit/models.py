"""Pydantic v2 data models for formkit.

Defines the normalized field schema shared by every extractor, the raw
extractor output it is built from, the ``ProcessedDocument`` returned by the
router, and the collaborator entities (``Form``, ``AutofillProfile``) that
the surrounding application persists.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from formkit.errors import FormKitError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class DocumentKind(str, Enum):
    """Closed set of document kinds the router can dispatch on."""

    PDF = "pdf"
    WORD = "word"
    SPREADSHEET = "spreadsheet"
    UNKNOWN = "unknown"


class FieldType(str, Enum):
    """Input type of a normalized form field."""

    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    DATE = "date"
    EMAIL = "email"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    FILE = "file"


class FormStatus(str, Enum):
    """Lifecycle status of a persisted form."""

    DRAFT = "draft"
    PROCESSING = "processing"
    READY = "ready"
    ERROR = "error"


# ---------------------------------------------------------------------------
# Field Models
# ---------------------------------------------------------------------------


class _CamelModel(BaseModel):
    """Accepts both snake_case names and the camelCase keys the UI stores."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class FieldValidation(_CamelModel):
    """Structural constraints on a field value."""

    pattern: str | None = None
    min_length: int | None = Field(default=None, ge=0)
    max_length: int | None = Field(default=None, ge=0)
    min: float | str | None = None
    max: float | str | None = None
    step: float | str | None = None


class FieldPosition(_CamelModel):
    """Location of a PDF widget: 0-indexed page, rect in PDF points."""

    page: int | None = Field(default=None, ge=0)
    x: float | None = None
    y: float | None = None
    width: float | None = None
    height: float | None = None


class RawField(_CamelModel):
    """A field as reported by one extractor, before normalization.

    Optional attributes follow each extractor's own conventions; the
    normalizer fills the gaps.
    """

    name: str
    id: str | None = None
    type: FieldType = FieldType.TEXT
    required: bool | None = None
    section: str | None = None
    category: str | None = None
    default_value: str | int | float | bool | None = None
    options: list[str] | None = None
    validation: FieldValidation | None = None
    position: FieldPosition | None = None
    description: str | None = None


class ExtractedField(_CamelModel):
    """Normalized, format-agnostic description of one fillable input.

    ``required``, ``category`` and ``section`` are always present.
    ``options`` is set if and only if ``type`` is ``select``.
    """

    id: str = Field(min_length=1)
    label: str
    type: FieldType
    required: bool = False
    category: str
    section: str
    default_value: str | int | float | bool | None = None
    options: list[str] | None = None
    validation: FieldValidation | None = None
    position: FieldPosition | None = None
    description: str | None = None

    @model_validator(mode="after")
    def _validate_options(self) -> ExtractedField:
        if self.type == FieldType.SELECT and not self.options:
            raise ValueError(f"Select field '{self.id}' must have at least one option.")
        if self.type != FieldType.SELECT and self.options is not None:
            raise ValueError(f"Field '{self.id}' of type '{self.type.value}' cannot carry options.")
        return self


# ---------------------------------------------------------------------------
# Extraction Models
# ---------------------------------------------------------------------------


class ExtractionOutput(BaseModel):
    """Raw result of one extractor run, before normalization."""

    fields: list[RawField] = Field(default_factory=list)
    page_count: int | None = None
    title: str | None = None
    author: str | None = None
    subject: str | None = None
    created: str | None = None
    modified: str | None = None
    raw_text: str | None = None
    warnings: list[FormKitError] = Field(default_factory=list)


class DocumentMetadata(_CamelModel):
    """Document-level metadata attached to a ProcessedDocument and its Form."""

    title: str
    author: str | None = None
    subject: str | None = None
    created: str | None = None
    modified: str | None = None
    page_count: int | None = None
    fields_count: int | None = None


class ProcessedDocument(BaseModel):
    """Complete extraction output for one uploaded file.

    Created fresh per upload by the router and never mutated afterwards.
    The preview handle identified by ``preview_id`` must be released by the
    caller once the preview is no longer displayed.
    """

    model_config = ConfigDict(frozen=True)

    kind: DocumentKind
    file_name: str
    fields: list[ExtractedField]
    preview_url: str
    preview_id: str
    pages: int | None = None
    metadata: DocumentMetadata
    raw_text: str | None = None
    warnings: list[FormKitError] = Field(default_factory=list)


class DocumentInput(BaseModel):
    """One file handed to the router: its name and raw bytes."""

    file_name: str
    data: bytes


class BatchItemResult(BaseModel):
    """Outcome of one file in a batch: a document or the error that stopped it."""

    file_name: str
    document: ProcessedDocument | None = None
    error: FormKitError | None = None

    @property
    def ok(self) -> bool:
        return self.document is not None


# ---------------------------------------------------------------------------
# Collaborator Entities
# ---------------------------------------------------------------------------

_FORM_TYPE_BY_KIND: dict[DocumentKind, str] = {
    DocumentKind.PDF: "pdf",
    DocumentKind.WORD: "docx",
    DocumentKind.SPREADSHEET: "xlsx",
}

_MIME_BY_EXTENSION: dict[str, str] = {
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


class Form(_CamelModel):
    """Persisted form entity owned by the Form Store collaborator."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    type: Literal["pdf", "xlsx", "docx", "other"] = "other"
    size: int = Field(default=0, ge=0)
    original_name: str = ""
    mime_type: str = "application/octet-stream"
    fields: list[ExtractedField] = Field(default_factory=list)
    preview_url: str = ""
    metadata: DocumentMetadata
    is_favorite: bool = False
    tags: list[str] = Field(default_factory=list)
    status: FormStatus = FormStatus.DRAFT
    error: str | None = None
    version: int = Field(default=1, ge=1)
    date_added: datetime = Field(default_factory=_utcnow)
    last_modified: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_processed(
        cls,
        document: ProcessedDocument,
        size: int,
        tags: list[str] | None = None,
    ) -> Form:
        """Seed a ready Form from a ProcessedDocument."""
        extension = document.file_name.rsplit(".", 1)[-1].lower()
        return cls(
            name=document.metadata.title,
            type=_FORM_TYPE_BY_KIND.get(document.kind, "other"),  # type: ignore[arg-type]
            size=size,
            original_name=document.file_name,
            mime_type=_MIME_BY_EXTENSION.get(extension, "application/octet-stream"),
            fields=list(document.fields),
            preview_url=document.preview_url,
            metadata=document.metadata,
            tags=list(tags or []),
            status=FormStatus.READY,
        )


class ProfileField(_CamelModel):
    """One name/value pair in an autofill profile."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    value: str


class AutofillProfile(_CamelModel):
    """Named set of values used to pre-populate matching form fields."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    type: Literal["personal", "company"] = "personal"
    description: str | None = None
    last_updated: datetime = Field(default_factory=_utcnow)
    fields: list[ProfileField] = Field(default_factory=list)
