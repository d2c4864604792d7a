"""Shared test fixtures for formkit tests.

Builds small in-memory PDF (with and without AcroForm widgets) and XLSX
documents, and provides stub extractors for router tests.
"""

from __future__ import annotations

import io
import threading
import time
from datetime import datetime, timezone

import fitz  # PyMuPDF
import openpyxl
import pytest

from formkit.config import FormKitConfig
from formkit.models import (
    DocumentMetadata,
    ExtractedField,
    ExtractionOutput,
    FieldType,
    Form,
    RawField,
)
from formkit.preview import PreviewStore


# ---------------------------------------------------------------------------
# Document builders
# ---------------------------------------------------------------------------


def build_pdf_with_widgets(widgets: list[dict], title: str | None = None) -> bytes:
    """Build a one-page PDF holding the described form widgets.

    Each dict takes ``name``, ``type`` (a ``PDF_WIDGET_TYPE_*`` constant)
    and optional ``flags``, ``value``, ``choices`` and ``rect``.
    """
    doc = fitz.open()
    page = doc.new_page()
    for i, desc in enumerate(widgets):
        widget = fitz.Widget()
        widget.field_name = desc["name"]
        widget.field_type = desc["type"]
        widget.rect = desc.get("rect", fitz.Rect(50, 50 + i * 40, 250, 70 + i * 40))
        if "flags" in desc:
            widget.field_flags = desc["flags"]
        if "choices" in desc:
            widget.choice_values = desc["choices"]
        if "value" in desc:
            widget.field_value = desc["value"]
        page.add_widget(widget)
    if title is not None:
        doc.set_metadata({"title": title})
    data = doc.tobytes()
    doc.close()
    return data


def build_plain_pdf(pages: int = 1) -> bytes:
    """Build a PDF with text only and no interactive form."""
    doc = fitz.open()
    for n in range(pages):
        page = doc.new_page()
        page.insert_text((72, 72), f"Page {n + 1}")
    data = doc.tobytes()
    doc.close()
    return data


def build_xlsx(rows: list[list], sheets: dict[str, list[list]] | None = None) -> bytes:
    """Build an XLSX whose first sheet holds *rows*; extra sheets follow."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Data"
    for row in rows:
        ws.append(row)
    for name, extra_rows in (sheets or {}).items():
        extra = wb.create_sheet(name)
        for row in extra_rows:
            extra.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Stub extractors
# ---------------------------------------------------------------------------


class SpyExtractor:
    """Records every call and returns a fixed ExtractionOutput."""

    def __init__(self, output: ExtractionOutput | None = None) -> None:
        self.calls: list[str] = []
        self._output = output or ExtractionOutput(
            fields=[RawField(name="Full Name")],
        )

    def extract(self, data: bytes, file_name: str) -> ExtractionOutput:
        self.calls.append(file_name)
        return self._output.model_copy(deep=True)


class SlowExtractor:
    """Sleeps before returning; tracks the peak number of concurrent calls."""

    def __init__(self, delay: float = 0.05) -> None:
        self._delay = delay
        self._lock = threading.Lock()
        self._active = 0
        self.peak = 0

    def extract(self, data: bytes, file_name: str) -> ExtractionOutput:
        with self._lock:
            self._active += 1
            self.peak = max(self.peak, self._active)
        try:
            time.sleep(self._delay)
        finally:
            with self._lock:
                self._active -= 1
        return ExtractionOutput(fields=[RawField(name="Amount", type=FieldType.NUMBER)])


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def form_config() -> FormKitConfig:
    """Default config."""
    return FormKitConfig()


@pytest.fixture()
def preview_store(tmp_path) -> PreviewStore:
    """Preview store rooted in the test's temp directory."""
    return PreviewStore(str(tmp_path / "previews"))


@pytest.fixture()
def sample_pdf() -> bytes:
    """PDF with a read-only hierarchical text field and a checked checkbox."""
    return build_pdf_with_widgets(
        [
            {
                "name": "header.title",
                "type": fitz.PDF_WIDGET_TYPE_TEXT,
                "flags": fitz.PDF_FIELD_IS_READ_ONLY,
                "value": "Application",
            },
            {
                "name": "agree",
                "type": fitz.PDF_WIDGET_TYPE_CHECKBOX,
                "value": True,
            },
        ]
    )


@pytest.fixture()
def sample_xlsx() -> bytes:
    """XLSX with a Name/Amount/Date header and one sample row."""
    return build_xlsx([["Name", "Amount", "Date"], ["Alice", 42, "2024-01-01"]])


@pytest.fixture()
def sample_fields() -> list[ExtractedField]:
    """A small normalized field list for autofill and model tests."""
    return [
        ExtractedField(id="full_name", label="Full Name", type=FieldType.TEXT, category="Main", section="Main"),
        ExtractedField(id="email", label="Email", type=FieldType.EMAIL, category="Main", section="Main"),
        ExtractedField(id="agree", label="Agree to terms", type=FieldType.CHECKBOX, category="Main", section="Main"),
        ExtractedField(id="amount", label="Amount", type=FieldType.NUMBER, category="Main", section="Main"),
        ExtractedField(
            id="country",
            label="Country",
            type=FieldType.SELECT,
            options=["Canada", "France"],
            category="Main",
            section="Main",
        ),
    ]


def make_form(
    name: str = "Intake",
    date_added: datetime | None = None,
    **kwargs,
) -> Form:
    """Factory for Form test instances."""
    added = date_added or datetime(2024, 1, 1, tzinfo=timezone.utc)
    return Form(
        name=name,
        type="pdf",
        size=1024,
        original_name=f"{name}.pdf",
        metadata=DocumentMetadata(title=name),
        date_added=added,
        last_modified=added,
        **kwargs,
    )
