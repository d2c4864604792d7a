"""FormKitConfig and configuration defaults.

Provides ``FormKitConfig`` with all tunable parameters and sensible
defaults.  Supports loading overrides from YAML or JSON files via the
``from_file()`` classmethod.
"""

from __future__ import annotations

import json
import pathlib

from pydantic import BaseModel, Field, model_validator


class FormKitConfig(BaseModel):
    """All tunable parameters for the document field-extraction pipeline.

    Override individual values via constructor kwargs or load a complete
    config from a file with ``FormKitConfig.from_file(path)``.
    """

    # --- Upload guard (applied by callers, not by the router) ---
    max_file_size_mb: int = Field(
        default=50,
        ge=1,
        description="Maximum upload size accepted by UploadValidator.",
    )

    # --- Concurrency / Resource Limits ---
    batch_concurrency: int = Field(
        default=3,
        description="Maximum documents processed at once by aprocess_batch().",
    )
    per_document_timeout_seconds: float | None = Field(
        default=None,
        description="Optional timeout for aprocess(). None disables it.",
    )

    # --- Preview handles ---
    preview_dir: str | None = Field(
        default=None,
        description="Directory for preview files. None uses the system temp dir.",
    )

    # --- Normalization defaults ---
    default_section: str = "Main"
    default_category: str = "Other"

    # --- PDF ---
    pdf_require_acroform: bool = Field(
        default=True,
        description=(
            "Raise DocumentParseError when the PDF has no interactive form. "
            "When False, an empty field list and W_PDF_NO_FORM are returned."
        ),
    )

    # --- Word ---
    word_fallback_fields: bool = Field(
        default=False,
        description="Emit generic Title/Author/Content fields when none are detected.",
    )
    word_infer_types_from_labels: bool = Field(
        default=False,
        description="Refine text field types from label keywords (email, date, ...).",
    )

    # --- Spreadsheet ---
    spreadsheet_section: str = "Sheet1"
    spreadsheet_sample_as_default: bool = Field(
        default=True,
        description="Carry the first data row value as each field's default_value.",
    )

    # --- Logging / PII Safety ---
    log_sample_data: bool = Field(
        default=False,
        description="If True, extracted default values may appear in logs.",
    )

    @model_validator(mode="after")
    def _validate_limits(self) -> FormKitConfig:
        if self.batch_concurrency < 1:
            raise ValueError("batch_concurrency must be at least 1")
        if (
            self.per_document_timeout_seconds is not None
            and self.per_document_timeout_seconds <= 0
        ):
            raise ValueError("per_document_timeout_seconds must be positive")
        if not self.default_section.strip():
            raise ValueError("default_section must not be blank")
        if not self.default_category.strip():
            raise ValueError("default_category must not be blank")
        return self

    @classmethod
    def from_file(cls, path: str) -> FormKitConfig:
        """Load configuration from a YAML or JSON file.

        File format is detected by extension: ``.yaml`` / ``.yml`` for YAML,
        ``.json`` for JSON.  Any keys present in the file override the
        corresponding defaults; keys not present retain their defaults.
        """
        file_path = pathlib.Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        suffix = file_path.suffix.lower()

        if suffix in (".yaml", ".yml"):
            import yaml  # type: ignore[import-untyped]

            with open(file_path) as fh:
                data = yaml.safe_load(fh)
        elif suffix == ".json":
            with open(file_path) as fh:
                data = json.load(fh)
        else:
            raise ValueError(
                f"Unsupported config file extension '{suffix}'. "
                "Use .yaml, .yml, or .json."
            )

        if data is None:
            data = {}

        return cls(**data)
