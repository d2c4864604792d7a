"""Unit tests for formkit.errors -- ErrorCode enum and FormKitError model."""

from __future__ import annotations

import pytest

from formkit.errors import (
    DocumentParseError,
    ErrorCode,
    ExtractionTimeoutError,
    FormKitError,
    FormKitException,
    UnsupportedFileTypeError,
)


# ---------------------------------------------------------------------------
# ErrorCode enum tests
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestErrorCodeEnum:
    """Tests for the ErrorCode(str, Enum) taxonomy."""

    def test_all_names_equal_values(self) -> None:
        for member in ErrorCode:
            assert member.name == member.value, (
                f"ENUM_VALUE mismatch: {member.name!r} != {member.value!r}"
            )

    def test_all_members_are_strings(self) -> None:
        for member in ErrorCode:
            assert isinstance(member, str)

    def test_every_code_is_error_or_warning(self) -> None:
        for member in ErrorCode:
            assert member.value.startswith(("E_", "W_"))

    def test_warning_codes(self) -> None:
        warnings = {m for m in ErrorCode if m.value.startswith("W_")}
        assert warnings == {
            ErrorCode.W_EMPTY_RESULT,
            ErrorCode.W_PDF_NO_FORM,
            ErrorCode.W_WORD_CONVERTER_MESSAGES,
            ErrorCode.W_FALLBACK_FIELDS_USED,
        }


# ---------------------------------------------------------------------------
# FormKitError model tests
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestFormKitError:
    def test_minimal_construction(self) -> None:
        err = FormKitError(code=ErrorCode.E_PARSE_CORRUPT, message="bad bytes")
        assert err.stage is None
        assert err.recoverable is False
        assert err.file_name is None
        assert err.field_id is None

    def test_serialization_uses_code_value(self) -> None:
        err = FormKitError(
            code=ErrorCode.W_EMPTY_RESULT,
            message="nothing found",
            recoverable=True,
            file_name="a.docx",
        )
        data = err.model_dump(mode="json")
        assert data["code"] == "W_EMPTY_RESULT"
        assert data["file_name"] == "a.docx"

    def test_is_not_an_exception(self) -> None:
        assert not issubclass(FormKitError, Exception)


# ---------------------------------------------------------------------------
# Exception wrapper tests
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestFormKitException:
    def test_wraps_error_model(self) -> None:
        exc = FormKitException(
            code=ErrorCode.E_STORE_NOT_FOUND,
            message="Form 'x' not found",
            stage="form_store",
        )
        assert isinstance(exc.error, FormKitError)
        assert exc.code == ErrorCode.E_STORE_NOT_FOUND
        assert exc.message == "Form 'x' not found"
        assert exc.stage == "form_store"
        assert exc.recoverable is False
        assert str(exc) == "Form 'x' not found"

    @pytest.mark.parametrize(
        ("exc_type", "code"),
        [
            (UnsupportedFileTypeError, ErrorCode.E_UNSUPPORTED_FILE_TYPE),
            (DocumentParseError, ErrorCode.E_PARSE_CORRUPT),
            (ExtractionTimeoutError, ErrorCode.E_EXTRACTION_TIMEOUT),
        ],
    )
    def test_subclass_default_codes(self, exc_type, code) -> None:
        exc = exc_type(message="boom")
        assert exc.code == code
        assert isinstance(exc, FormKitException)

    def test_explicit_code_overrides_default(self) -> None:
        exc = DocumentParseError(code=ErrorCode.E_PDF_NO_FORM, message="no form")
        assert exc.code == ErrorCode.E_PDF_NO_FORM

    def test_unsupported_user_message(self) -> None:
        assert UnsupportedFileTypeError.user_message == "Please upload a PDF, XLSX, or DOCX file."

    def test_catchable_by_base_type(self) -> None:
        with pytest.raises(FormKitException):
            raise DocumentParseError(message="corrupt")
