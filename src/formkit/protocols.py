"""Protocols for formkit extractors and the application's collaborators.

``DocumentExtractor`` is implemented once per ``DocumentKind``.  ``FormStore``
and ``ProfileStore`` describe the backend collaborators the application
drives with formkit output; formkit never calls them from the pipeline.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from formkit.models import AutofillProfile, ExtractionOutput, Form

__all__ = [
    "DocumentExtractor",
    "FormStore",
    "ProfileStore",
]


@runtime_checkable
class DocumentExtractor(Protocol):
    """Interface for one format-specific field extraction strategy."""

    def extract(self, data: bytes, file_name: str) -> ExtractionOutput:
        """Parse raw file bytes and report fields in source order.

        Raises:
            DocumentParseError: If the bytes are not a valid document of
                this kind.
        """
        ...


@runtime_checkable
class FormStore(Protocol):
    """Interface for form persistence.

    Concrete implementations might use: filesystem (JSON files), a hosted
    backend's REST client, or any key-value store.
    """

    def create(self, form: Form) -> Form:
        """Persist a new form and return it as stored."""
        ...

    def get(self, form_id: str) -> Form | None:
        """Retrieve a form by ID. None if not found."""
        ...

    def update(self, form_id: str, changes: dict[str, Any]) -> Form:
        """Apply a partial update and bump the form version."""
        ...

    def delete(self, form_id: str) -> None:
        """Remove a form."""
        ...

    def list(self) -> list[Form]:
        """List all forms, most recently added first."""
        ...

    def toggle_favorite(self, form_id: str, is_favorite: bool) -> Form:
        """Set the favorite flag on a form."""
        ...


@runtime_checkable
class ProfileStore(Protocol):
    """Interface for autofill profile persistence."""

    def create(self, profile: AutofillProfile) -> AutofillProfile:
        """Persist a new profile with its fields."""
        ...

    def get(self, profile_id: str) -> AutofillProfile | None:
        """Retrieve a profile by ID. None if not found."""
        ...

    def update(self, profile_id: str, changes: dict[str, Any]) -> AutofillProfile:
        """Apply a partial update to a profile and its fields."""
        ...

    def delete(self, profile_id: str) -> None:
        """Remove a profile and its fields."""
        ...

    def list(self) -> list[AutofillProfile]:
        """List all profiles ordered by name."""
        ...
