"""WordFieldExtractor: heuristic field inference from Word document text.

Word files carry no structured form model, so fields are inferred from the
raw text mammoth extracts.  The heuristic itself lives in the pure function
``infer_fields_from_text`` so it can be exercised without any document.
"""

from __future__ import annotations

import io
import logging
import re
import zipfile
from datetime import datetime

import docx
import mammoth  # type: ignore[import-untyped]
from docx.opc.exceptions import PackageNotFoundError

from formkit.config import FormKitConfig
from formkit.errors import DocumentParseError, ErrorCode, FormKitError
from formkit.models import ExtractionOutput, FieldType, FieldValidation, RawField

logger = logging.getLogger("formkit")

# ``<label>[:_]<value>``: label is everything before the first colon or
# underscore run, the value is whatever follows.
_FIELD_LINE_RE = re.compile(r"^(?P<label>[^_:]+)[_:]+\s*(?P<value>.*)$")
_CHECKBOX_RE = re.compile(r"\[\s*\]|\[x\]", re.IGNORECASE)
_CHECKED_RE = re.compile(r"\[x\]", re.IGNORECASE)

# Label keyword hints, first match wins.
_LABEL_TYPE_HINTS: list[tuple[re.Pattern[str], FieldType, FieldValidation | None]] = [
    (re.compile(r"e[\s-]?mail", re.IGNORECASE), FieldType.EMAIL, None),
    (re.compile(r"\bdate\b|\bdob\b", re.IGNORECASE), FieldType.DATE, None),
    (
        re.compile(r"amount|total|price|cost", re.IGNORECASE),
        FieldType.NUMBER,
        FieldValidation(min=0, step="0.01"),
    ),
    (re.compile(r"address", re.IGNORECASE), FieldType.TEXTAREA, None),
    (re.compile(r"description|notes?\b|comments?\b", re.IGNORECASE), FieldType.TEXTAREA, None),
]


def _is_section_header(line: str) -> bool:
    return line.isupper() or line.endswith(":")


def _clean_value(value: str) -> str | None:
    cleaned = value.strip().strip("_").strip()
    return cleaned or None


def _hint_for_label(label: str) -> tuple[FieldType, FieldValidation | None] | None:
    for pattern, field_type, validation in _LABEL_TYPE_HINTS:
        if pattern.search(label):
            return field_type, validation
    return None


def infer_fields_from_text(
    text: str,
    config: FormKitConfig | None = None,
) -> list[RawField]:
    """Infer form fields from plain text, line by line.

    - Blank lines are discarded; lines are trimmed.
    - An upper-case line, or one ending with ``:``, opens a new section
      and is not itself a field.
    - ``Label: value`` / ``Label____`` lines give a ``text`` field.
    - Lines containing ``[ ]`` or ``[x]`` also give a ``checkbox`` field,
      emitted after the same line's text field.
    """
    cfg = config or FormKitConfig()
    fields: list[RawField] = []
    section = cfg.default_section

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        if _is_section_header(line):
            section = line.replace(":", "", 1).strip() or cfg.default_section
            continue

        match = _FIELD_LINE_RE.match(line)
        if match:
            label = match.group("label").strip()
            field_type = FieldType.TEXT
            validation: FieldValidation | None = None
            if cfg.word_infer_types_from_labels:
                hint = _hint_for_label(label)
                if hint is not None:
                    field_type, validation = hint
            fields.append(
                RawField(
                    name=label,
                    type=field_type,
                    required=False,
                    default_value=_clean_value(match.group("value")),
                    section=section,
                    validation=validation,
                )
            )

        if _CHECKBOX_RE.search(line):
            label = _CHECKBOX_RE.sub("", line).strip()
            if not label:
                logger.debug("formkit.word.checkbox_without_label")
                continue
            fields.append(
                RawField(
                    name=label,
                    type=FieldType.CHECKBOX,
                    required=False,
                    default_value="true" if _CHECKED_RE.search(line) else "false",
                    section=section,
                )
            )

    return fields


def fallback_fields() -> list[RawField]:
    """Generic fields offered when nothing could be inferred from the text."""
    return [
        RawField(
            id="document_title",
            name="Document Title",
            type=FieldType.TEXT,
            required=True,
            category="Document Information",
        ),
        RawField(
            id="author",
            name="Author",
            type=FieldType.TEXT,
            required=False,
            category="Document Information",
        ),
        RawField(
            id="content",
            name="Content",
            type=FieldType.TEXTAREA,
            required=False,
            category="Document Content",
        ),
    ]


def read_core_properties(data: bytes) -> dict[str, str]:
    """Read title/author/subject/created/modified via python-docx.

    Returns an empty dict for anything python-docx cannot open as a Word
    package (legacy ``.doc`` files, truncated or foreign zips).
    """
    try:
        core = docx.Document(io.BytesIO(data)).core_properties
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as exc:
        logger.debug("formkit.word.core_properties_unavailable: %s", exc)
        return {}

    props: dict[str, str] = {}
    for key, value in (
        ("title", core.title),
        ("author", core.author),
        ("subject", core.subject),
        ("created", core.created),
        ("modified", core.modified),
    ):
        if isinstance(value, datetime):
            props[key] = value.isoformat()
        elif value and value.strip():
            props[key] = value.strip()
    return props


class WordFieldExtractor:
    """Extracts fields from ``.docx``/``.doc`` files via mammoth raw text.

    Best-effort by nature: an empty field list is a valid result.
    """

    def __init__(self, config: FormKitConfig | None = None) -> None:
        self._config = config or FormKitConfig()

    def extract(self, data: bytes, file_name: str) -> ExtractionOutput:
        try:
            result = mammoth.extract_raw_text(io.BytesIO(data))
        except Exception as exc:
            raise DocumentParseError(
                message=f"Failed to extract text from Word document: {exc}",
                stage="word_extraction",
                file_name=file_name,
            ) from exc

        text: str = result.value or ""
        messages = [str(m) for m in result.messages]

        output = ExtractionOutput(raw_text=text, **read_core_properties(data))

        if messages:
            for msg in messages:
                logger.warning("formkit.word.converter_message: %s", msg)
            output.warnings.append(
                FormKitError(
                    code=ErrorCode.W_WORD_CONVERTER_MESSAGES,
                    message="; ".join(messages),
                    stage="word_extraction",
                    recoverable=True,
                    file_name=file_name,
                )
            )

        output.fields = infer_fields_from_text(text, self._config)

        if not output.fields and self._config.word_fallback_fields:
            output.fields = fallback_fields()
            output.warnings.append(
                FormKitError(
                    code=ErrorCode.W_FALLBACK_FIELDS_USED,
                    message="No fields detected; generic fields supplied",
                    stage="word_extraction",
                    recoverable=True,
                    file_name=file_name,
                )
            )

        return output
