"""Tests for WordFieldExtractor and the line-based inference heuristic."""

from __future__ import annotations

import io
import zipfile
from datetime import datetime
from types import SimpleNamespace
from unittest.mock import patch

import docx
import pytest

from formkit.config import FormKitConfig
from formkit.errors import DocumentParseError, ErrorCode
from formkit.extractors.word_fields import (
    WordFieldExtractor,
    fallback_fields,
    infer_fields_from_text,
    read_core_properties,
)
from formkit.models import FieldType
from formkit.normalizer import normalize_fields


def _docx_with_core_props() -> bytes:
    document = docx.Document()
    document.add_paragraph("Full Name: Jane Doe")
    props = document.core_properties
    props.title = "Leave Request"
    props.author = "HR Team"
    props.subject = ""
    props.created = datetime(2024, 3, 1, 9, 0, 0)
    buf = io.BytesIO()
    document.save(buf)
    return buf.getvalue()


def _mammoth_result(text: str, messages: list[str] | None = None) -> SimpleNamespace:
    return SimpleNamespace(value=text, messages=messages or [])


# ---------------------------------------------------------------------------
# infer_fields_from_text
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestInferFieldsFromText:
    def test_section_text_and_checkbox(self) -> None:
        fields = infer_fields_from_text("NAME:\nFull Name_John\n[x] Agree to terms\n")

        assert len(fields) == 2
        name, agree = fields
        assert name.name == "Full Name"
        assert name.type == FieldType.TEXT
        assert name.default_value == "John"
        assert name.section == "NAME"
        assert agree.name == "Agree to terms"
        assert agree.type == FieldType.CHECKBOX
        assert agree.default_value == "true"
        assert agree.section == "NAME"

    def test_unchecked_box(self) -> None:
        [field] = infer_fields_from_text("[ ] Subscribe to newsletter")
        assert field.type == FieldType.CHECKBOX
        assert field.default_value == "false"

    def test_checked_box_case_insensitive(self) -> None:
        [field] = infer_fields_from_text("[X] Accept")
        assert field.default_value == "true"

    def test_line_with_text_and_checkbox_gives_both(self) -> None:
        fields = infer_fields_from_text("Married: [x]")
        assert [f.type for f in fields] == [FieldType.TEXT, FieldType.CHECKBOX]
        assert fields[0].name == "Married"
        assert fields[1].name == "Married:"

    def test_empty_checkbox_label_skipped(self) -> None:
        assert infer_fields_from_text("[ ]") == []

    def test_blank_underscores_give_no_default(self) -> None:
        [field] = infer_fields_from_text("Signature: ________")
        assert field.name == "Signature"
        assert field.default_value is None

    def test_default_section_before_any_header(self) -> None:
        [field] = infer_fields_from_text("Phone: 555-0100")
        assert field.section == "Main"
        assert field.default_value == "555-0100"

    def test_upper_case_line_opens_section(self) -> None:
        fields = infer_fields_from_text("CONTACT DETAILS\nEmail: a@b.c\nEMPLOYMENT\nEmployer: ACME")
        assert [(f.name, f.section) for f in fields] == [
            ("Email", "CONTACT DETAILS"),
            ("Employer", "EMPLOYMENT"),
        ]

    def test_blank_and_plain_lines_ignored(self) -> None:
        text = "\n\n   \nThis paragraph has no separator\n"
        assert infer_fields_from_text(text) == []

    def test_label_type_hints_off_by_default(self) -> None:
        [field] = infer_fields_from_text("Email Address: jane@example.com")
        assert field.type == FieldType.TEXT

    def test_label_type_hints(self) -> None:
        cfg = FormKitConfig(word_infer_types_from_labels=True)
        fields = infer_fields_from_text(
            "Email: a@b.c\nStart Date: 2024-01-01\nTotal Amount: 10\nHome Address: 1 Main St\nFavourite colour: blue",
            cfg,
        )
        assert [f.type for f in fields] == [
            FieldType.EMAIL,
            FieldType.DATE,
            FieldType.NUMBER,
            FieldType.TEXTAREA,
            FieldType.TEXT,
        ]
        assert fields[2].validation is not None
        assert fields[2].validation.min == 0

    def test_duplicate_labels_normalize_to_unique_ids(self) -> None:
        raw = infer_fields_from_text("Name: A\nName: B")
        assert [f.id for f in normalize_fields(raw)] == ["name", "name_2"]


# ---------------------------------------------------------------------------
# Core properties
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestReadCoreProperties:
    def test_reads_title_and_author(self) -> None:
        props = read_core_properties(_docx_with_core_props())
        assert props["title"] == "Leave Request"
        assert props["author"] == "HR Team"
        assert props["created"] == "2024-03-01T09:00:00"
        assert "subject" not in props

    def test_non_zip_gives_empty(self) -> None:
        assert read_core_properties(b"\xd0\xcf\x11\xe0legacy") == {}

    def test_zip_that_is_not_a_word_package(self) -> None:
        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w") as archive:
            archive.writestr("word/document.xml", "<w:document/>")
        assert read_core_properties(buf.getvalue()) == {}


# ---------------------------------------------------------------------------
# WordFieldExtractor
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestWordFieldExtractor:
    def test_extracts_fields_and_raw_text(self) -> None:
        text = "APPLICANT\nFull Name: Jane Doe\n[ ] Has a car"
        with patch("formkit.extractors.word_fields.mammoth") as mock_mammoth:
            mock_mammoth.extract_raw_text.return_value = _mammoth_result(text)
            output = WordFieldExtractor().extract(_docx_with_core_props(), "leave.docx")

        assert output.raw_text == text
        assert [f.name for f in output.fields] == ["Full Name", "Has a car"]
        assert output.title == "Leave Request"
        assert output.author == "HR Team"
        assert output.warnings == []

    def test_converter_messages_become_warning(self) -> None:
        with patch("formkit.extractors.word_fields.mammoth") as mock_mammoth:
            mock_mammoth.extract_raw_text.return_value = _mammoth_result(
                "Name: X", ["Warning: unrecognised style"]
            )
            output = WordFieldExtractor().extract(b"dummy", "a.docx")

        [warning] = output.warnings
        assert warning.code == ErrorCode.W_WORD_CONVERTER_MESSAGES
        assert "unrecognised style" in warning.message

    def test_converter_failure_raises_parse_error(self) -> None:
        with patch("formkit.extractors.word_fields.mammoth") as mock_mammoth:
            mock_mammoth.extract_raw_text.side_effect = ValueError("Not a valid Word document")
            with pytest.raises(DocumentParseError, match="Not a valid Word document") as exc_info:
                WordFieldExtractor().extract(b"dummy", "bad.docx")
        assert exc_info.value.stage == "word_extraction"

    def test_real_document_end_to_end(self) -> None:
        output = WordFieldExtractor().extract(_docx_with_core_props(), "leave.docx")
        assert [(f.name, f.default_value) for f in output.fields] == [("Full Name", "Jane Doe")]
        assert output.title == "Leave Request"
        assert "Full Name: Jane Doe" in output.raw_text

    def test_real_converter_rejects_garbage(self) -> None:
        with pytest.raises(DocumentParseError):
            WordFieldExtractor().extract(b"not a zip archive", "bad.docx")

    def test_no_fields_is_not_an_error(self) -> None:
        with patch("formkit.extractors.word_fields.mammoth") as mock_mammoth:
            mock_mammoth.extract_raw_text.return_value = _mammoth_result("Just prose.")
            output = WordFieldExtractor().extract(b"dummy", "prose.docx")
        assert output.fields == []
        assert output.warnings == []

    def test_fallback_fields_when_configured(self) -> None:
        extractor = WordFieldExtractor(FormKitConfig(word_fallback_fields=True))
        with patch("formkit.extractors.word_fields.mammoth") as mock_mammoth:
            mock_mammoth.extract_raw_text.return_value = _mammoth_result("Just prose.")
            output = extractor.extract(b"dummy", "prose.docx")

        assert [f.id for f in output.fields] == ["document_title", "author", "content"]
        assert [w.code for w in output.warnings] == [ErrorCode.W_FALLBACK_FIELDS_USED]

    def test_fallback_fields_shape(self) -> None:
        fields = normalize_fields(fallback_fields())
        assert [f.type for f in fields] == [FieldType.TEXT, FieldType.TEXT, FieldType.TEXTAREA]
        assert fields[0].required is True
        assert fields[2].category == "Document Content"
