"""SpreadsheetFieldExtractor: header-row field extraction.

Only the first worksheet (declaration order) is read.  Row 1 supplies the
field names; row 2, when present, is a sample used to infer each column's
type.  ``.xlsx`` is read with openpyxl, legacy ``.xls`` with xlrd.
"""

from __future__ import annotations

import io
import logging
from datetime import date, datetime, time
from typing import Any

import openpyxl
import xlrd  # type: ignore[import-untyped]

from formkit.classifier import extension_of
from formkit.config import FormKitConfig
from formkit.errors import DocumentParseError
from formkit.models import ExtractionOutput, FieldType, RawField

logger = logging.getLogger("formkit")

_DATE_FORMATS = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%Y-%m-%dT%H:%M:%S",
    "%d.%m.%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
)


def looks_like_date(value: str) -> bool:
    """Return True if *value* parses as a date in a common format."""
    text = value.strip()
    if not text:
        return False
    try:
        datetime.fromisoformat(text)
        return True
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            datetime.strptime(text, fmt)
            return True
        except ValueError:
            continue
    return False


def infer_field_type(sample: Any) -> FieldType:
    """Infer a column's field type from its first data cell."""
    if sample is None:
        return FieldType.TEXT
    # bool before numbers: bool is an int subclass
    if isinstance(sample, bool):
        return FieldType.CHECKBOX
    if isinstance(sample, (int, float)):
        return FieldType.NUMBER
    if isinstance(sample, (datetime, date)):
        return FieldType.DATE
    if isinstance(sample, str) and looks_like_date(sample):
        return FieldType.DATE
    return FieldType.TEXT


def format_sample(sample: Any) -> str | None:
    """Stringify a sample cell for use as a default value."""
    if sample is None:
        return None
    if isinstance(sample, bool):
        return "true" if sample else "false"
    if isinstance(sample, float) and sample.is_integer():
        return str(int(sample))
    if isinstance(sample, datetime):
        if sample.time() == time(0, 0):
            return sample.date().isoformat()
        return sample.isoformat()
    if isinstance(sample, (date, time)):
        return sample.isoformat()
    text = str(sample).strip()
    return text or None


def _iso(value: Any) -> str | None:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return None


class SpreadsheetFieldExtractor:
    """Extracts fields from the header row of a workbook's first sheet."""

    def __init__(self, config: FormKitConfig | None = None) -> None:
        self._config = config or FormKitConfig()

    def extract(self, data: bytes, file_name: str) -> ExtractionOutput:
        if extension_of(file_name) == "xls":
            headers, sample, output = self._read_xls(data, file_name)
        else:
            headers, sample, output = self._read_xlsx(data, file_name)

        for index, header in enumerate(headers):
            if header is None or not str(header).strip():
                continue
            value = sample[index] if index < len(sample) else None
            if isinstance(value, str) and not value.strip():
                value = None
            default = (
                format_sample(value)
                if self._config.spreadsheet_sample_as_default
                else None
            )
            output.fields.append(
                RawField(
                    name=str(header).strip(),
                    type=infer_field_type(value),
                    required=False,
                    default_value=default,
                    section=self._config.spreadsheet_section,
                )
            )

        if self._config.log_sample_data:
            logger.debug(
                "formkit.spreadsheet.sample_row",
                extra={"file_name": file_name, "sample": [format_sample(v) for v in sample]},
            )
        return output

    def _read_xlsx(
        self, data: bytes, file_name: str
    ) -> tuple[list[Any], list[Any], ExtractionOutput]:
        """Read the first two rows of the first sheet with openpyxl."""
        try:
            wb = openpyxl.load_workbook(
                io.BytesIO(data), read_only=True, data_only=True
            )
        except Exception as exc:
            raise DocumentParseError(
                message=f"Failed to open Excel workbook: {exc}",
                stage="spreadsheet_extraction",
                file_name=file_name,
            ) from exc

        try:
            props = wb.properties
            output = ExtractionOutput(
                title=props.title or None,
                author=props.creator or None,
                subject=props.subject or None,
                created=_iso(props.created),
                modified=_iso(props.modified),
            )
            if not wb.worksheets:
                return [], [], output
            ws = wb.worksheets[0]
            rows = list(ws.iter_rows(min_row=1, max_row=2, values_only=True))
        except Exception as exc:
            raise DocumentParseError(
                message=f"Failed to read Excel worksheet: {exc}",
                stage="spreadsheet_extraction",
                file_name=file_name,
            ) from exc
        finally:
            wb.close()

        headers = list(rows[0]) if rows else []
        sample = list(rows[1]) if len(rows) > 1 else []
        return headers, sample, output

    def _read_xls(
        self, data: bytes, file_name: str
    ) -> tuple[list[Any], list[Any], ExtractionOutput]:
        """Read the first two rows of the first sheet with xlrd."""
        try:
            book = xlrd.open_workbook(file_contents=data)
        except Exception as exc:
            raise DocumentParseError(
                message=f"Failed to open legacy Excel workbook: {exc}",
                stage="spreadsheet_extraction",
                file_name=file_name,
            ) from exc

        output = ExtractionOutput(author=getattr(book, "user_name", None) or None)
        try:
            if book.nsheets == 0:
                return [], [], output
            sheet = book.sheet_by_index(0)
            headers = (
                [self._xls_value(c, book) for c in sheet.row(0)]
                if sheet.nrows >= 1
                else []
            )
            sample = (
                [self._xls_value(c, book) for c in sheet.row(1)]
                if sheet.nrows >= 2
                else []
            )
        finally:
            book.release_resources()
        return headers, sample, output

    @staticmethod
    def _xls_value(cell: Any, book: Any) -> Any:
        """Convert an xlrd cell to the equivalent Python value."""
        if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK, xlrd.XL_CELL_ERROR):
            return None
        if cell.ctype == xlrd.XL_CELL_DATE:
            try:
                return xlrd.xldate_as_datetime(cell.value, book.datemode)
            except Exception as exc:
                logger.warning(
                    "formkit.spreadsheet.xls_date_conversion_failed: %s", exc
                )
                return cell.value
        if cell.ctype == xlrd.XL_CELL_BOOLEAN:
            return bool(cell.value)
        return cell.value
