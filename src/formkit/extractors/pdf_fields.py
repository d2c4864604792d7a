"""PDFFieldExtractor: interactive form widget extraction via PyMuPDF.

Reads the AcroForm widgets of a PDF and reports one field per
fully-qualified field name, in widget enumeration order (page by page).
"""

from __future__ import annotations

import logging
import re

import fitz  # PyMuPDF

from formkit.config import FormKitConfig
from formkit.errors import DocumentParseError, ErrorCode, FormKitError
from formkit.models import (
    ExtractionOutput,
    FieldPosition,
    FieldType,
    FieldValidation,
    RawField,
)

logger = logging.getLogger("formkit")

# Keyed on PyMuPDF's documented PDF_WIDGET_TYPE_* constants.  Kinds not
# listed here (push buttons, signatures, unknown) fall back to TEXT.
_FIELD_TYPE_BY_WIDGET: dict[int, FieldType] = {
    fitz.PDF_WIDGET_TYPE_TEXT: FieldType.TEXT,
    fitz.PDF_WIDGET_TYPE_CHECKBOX: FieldType.CHECKBOX,
    fitz.PDF_WIDGET_TYPE_COMBOBOX: FieldType.SELECT,
    fitz.PDF_WIDGET_TYPE_LISTBOX: FieldType.SELECT,
    fitz.PDF_WIDGET_TYPE_RADIOBUTTON: FieldType.RADIO,
}

_READ_ONLY_FLAG = fitz.PDF_FIELD_IS_READ_ONLY
_MULTILINE_FLAG = fitz.PDF_TX_FIELD_IS_MULTILINE

_OFF_VALUES = frozenset({"", "off", "false"})

_PDF_DATE_RE = re.compile(
    r"^D:(?P<Y>\d{4})(?P<m>\d{2})?(?P<d>\d{2})?(?P<H>\d{2})?(?P<M>\d{2})?(?P<S>\d{2})?"
)


def section_from_field_name(name: str, default: str = "Main") -> str:
    """Derive a section from a hierarchical field name.

    ``'applicant.address.city'`` -> ``'applicant > address'``; a name
    without dots gives *default*.
    """
    parts = name.split(".")[:-1]
    section = " > ".join(p for p in parts if p)
    return section or default


def pdf_date_to_iso(value: str | None) -> str | None:
    """Convert a PDF date string (``D:YYYYMMDDHHmmSS...``) to ISO 8601.

    Returns the input unchanged when it does not look like a PDF date, and
    None for empty input.
    """
    if not value:
        return None
    match = _PDF_DATE_RE.match(value)
    if match is None:
        return value
    parts = match.groupdict()
    date_part = f"{parts['Y']}-{parts['m'] or '01'}-{parts['d'] or '01'}"
    if parts["H"] is None:
        return date_part
    return f"{date_part}T{parts['H']}:{parts['M'] or '00'}:{parts['S'] or '00'}"


def _option_label(entry: object) -> str:
    """Choice entries are either plain strings or ``[export, display]`` pairs."""
    if isinstance(entry, (list, tuple)) and entry:
        return str(entry[-1])
    return str(entry)


class PDFFieldExtractor:
    """Extracts fields from a PDF's interactive form (AcroForm).

    Raises ``DocumentParseError`` when the bytes are not a readable PDF or
    when the document carries no form object (unless
    ``config.pdf_require_acroform`` is False).
    """

    def __init__(self, config: FormKitConfig | None = None) -> None:
        self._config = config or FormKitConfig()

    def extract(self, data: bytes, file_name: str) -> ExtractionOutput:
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as exc:
            raise DocumentParseError(
                message=f"Failed to open PDF: {exc}",
                stage="pdf_extraction",
                file_name=file_name,
            ) from exc

        with doc:
            if doc.needs_pass:
                raise DocumentParseError(
                    message="PDF is password-protected",
                    stage="pdf_extraction",
                    file_name=file_name,
                )
            try:
                return self._extract_from_document(doc, file_name)
            except DocumentParseError:
                raise
            except Exception as exc:
                raise DocumentParseError(
                    message=f"Failed to read PDF form fields: {exc}",
                    stage="pdf_extraction",
                    file_name=file_name,
                ) from exc

    def _extract_from_document(
        self, doc: fitz.Document, file_name: str
    ) -> ExtractionOutput:
        metadata = doc.metadata or {}
        output = ExtractionOutput(
            page_count=doc.page_count,
            title=metadata.get("title") or None,
            author=metadata.get("author") or None,
            subject=metadata.get("subject") or None,
            created=pdf_date_to_iso(metadata.get("creationDate")),
            modified=pdf_date_to_iso(metadata.get("modDate")),
        )

        if not self._has_acroform(doc):
            if self._config.pdf_require_acroform:
                raise DocumentParseError(
                    code=ErrorCode.E_PDF_NO_FORM,
                    message="PDF has no interactive form",
                    stage="pdf_extraction",
                    file_name=file_name,
                )
            logger.warning(
                "formkit.pdf.no_form",
                extra={"file_name": file_name},
            )
            output.warnings.append(
                FormKitError(
                    code=ErrorCode.W_PDF_NO_FORM,
                    message="PDF has no interactive form; no fields extracted",
                    stage="pdf_extraction",
                    recoverable=True,
                    file_name=file_name,
                )
            )
            return output

        # Unnamed widgets are never merged with each other
        by_key: dict[str, RawField] = {}
        for page in doc:
            for widget in page.widgets():
                key = widget.field_name or f"xref:{widget.xref}"
                existing = by_key.get(key)
                if existing is None:
                    field = self._widget_to_field(widget, page.number)
                    by_key[key] = field
                    output.fields.append(field)
                elif existing.type == FieldType.RADIO and existing.default_value is None:
                    # Radio groups: one widget per choice, the checked one carries the value
                    existing.default_value = self._radio_value(widget)

        logger.debug(
            "formkit.pdf.widgets_read",
            extra={"file_name": file_name, "field_count": len(output.fields)},
        )
        return output

    @staticmethod
    def _has_acroform(doc: fitz.Document) -> bool:
        kind, _ = doc.xref_get_key(doc.pdf_catalog(), "AcroForm")
        return kind != "null"

    def _widget_to_field(self, widget: fitz.Widget, page_number: int) -> RawField:
        name = widget.field_name or ""
        flags = widget.field_flags or 0
        field_type = _FIELD_TYPE_BY_WIDGET.get(widget.field_type)
        if field_type is None:
            logger.debug(
                "formkit.pdf.widget_type_fallback",
                extra={"widget_type": widget.field_type_string},
            )
            field_type = FieldType.TEXT
        elif field_type == FieldType.TEXT and flags & _MULTILINE_FLAG:
            field_type = FieldType.TEXTAREA

        options: list[str] | None = None
        if field_type == FieldType.SELECT:
            options = [_option_label(c) for c in (widget.choice_values or [])]

        if field_type == FieldType.CHECKBOX:
            default_value: str | None = self._checkbox_value(widget)
        elif field_type == FieldType.RADIO:
            default_value = self._radio_value(widget)
        else:
            default_value = self._text_value(widget.field_value)

        validation: FieldValidation | None = None
        max_len = getattr(widget, "text_maxlen", 0) or 0
        if field_type in (FieldType.TEXT, FieldType.TEXTAREA) and max_len > 0:
            validation = FieldValidation(max_length=max_len)

        rect = widget.rect
        return RawField(
            id=name or None,
            name=name,
            type=field_type,
            required=not bool(flags & _READ_ONLY_FLAG),
            section=section_from_field_name(name, self._config.default_section),
            default_value=default_value,
            options=options,
            validation=validation,
            position=FieldPosition(
                page=page_number,
                x=rect.x0,
                y=rect.y0,
                width=rect.width,
                height=rect.height,
            ),
        )

    @staticmethod
    def _text_value(value: object) -> str | None:
        if value is None:
            return None
        if isinstance(value, (list, tuple)):
            value = ", ".join(str(v) for v in value)
        text = str(value)
        return text if text != "" else None

    @staticmethod
    def _checkbox_value(widget: fitz.Widget) -> str:
        value = widget.field_value
        if isinstance(value, bool):
            return "true" if value else "false"
        return "false" if str(value or "").lower() in _OFF_VALUES else "true"

    @staticmethod
    def _radio_value(widget: fitz.Widget) -> str | None:
        value = widget.field_value
        if value is True:
            on_state = widget.on_state()
            return str(on_state) if on_state else None
        if value is None or value is False or str(value).lower() in _OFF_VALUES:
            return None
        return str(value)
