"""Filesystem-based FormStore and ProfileStore implementations.

Persists each entity as one JSON file:
    {base_path}/{form_id}.json      -- FileSystemFormStore
    {base_path}/{profile_id}.json   -- FileSystemProfileStore

Implements the FormStore and ProfileStore protocols via structural subtyping.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from formkit.errors import ErrorCode, FormKitException
from formkit.models import AutofillProfile, Form

logger = logging.getLogger("formkit")

_ModelT = TypeVar("_ModelT", bound=BaseModel)


class _JsonDirectory(Generic[_ModelT]):
    """One-model-per-file JSON persistence shared by both stores."""

    def __init__(self, base_path: str, model: type[_ModelT], entity: str) -> None:
        self._base_path = Path(base_path)
        self._base_path.mkdir(parents=True, exist_ok=True)
        self._model = model
        self._entity = entity
        self.lock = threading.Lock()

    def _path(self, entity_id: str) -> Path:
        return self._base_path / f"{entity_id}.json"

    def exists(self, entity_id: str) -> bool:
        return self._path(entity_id).exists()

    def read(self, entity_id: str) -> _ModelT | None:
        path = self._path(entity_id)
        if not path.exists():
            return None
        return self._model.model_validate(json.loads(path.read_text()))

    def read_required(self, entity_id: str) -> _ModelT:
        entity = self.read(entity_id)
        if entity is None:
            raise FormKitException(
                code=ErrorCode.E_STORE_NOT_FOUND,
                message=f"{self._entity} '{entity_id}' not found",
                stage=f"{self._entity.lower()}_store",
            )
        return entity

    def write(self, entity_id: str, entity: _ModelT) -> None:
        data = entity.model_dump(mode="json")
        self._path(entity_id).write_text(json.dumps(data, indent=2))

    def remove(self, entity_id: str) -> None:
        path = self._path(entity_id)
        if not path.exists():
            raise FormKitException(
                code=ErrorCode.E_STORE_NOT_FOUND,
                message=f"{self._entity} '{entity_id}' not found",
                stage=f"{self._entity.lower()}_store",
            )
        path.unlink()

    def read_all(self) -> list[_ModelT]:
        return [
            self._model.model_validate(json.loads(p.read_text()))
            for p in sorted(self._base_path.glob("*.json"))
        ]

    def conflict(self, entity_id: str) -> FormKitException:
        return FormKitException(
            code=ErrorCode.E_STORE_CONFLICT,
            message=f"{self._entity} '{entity_id}' already exists",
            stage=f"{self._entity.lower()}_store",
        )


def _merge(entity: _ModelT, changes: dict[str, Any], protected: set[str]) -> _ModelT:
    """Validate *changes* against the entity's model and apply them.

    Keys may use field names or camelCase aliases; *protected* keys are
    ignored.
    """
    fields = type(entity).model_fields
    by_alias = {info.alias: name for name, info in fields.items() if info.alias}
    updates: dict[str, Any] = {}
    for key, value in changes.items():
        name = by_alias.get(key, key)
        if name in fields and name not in protected:
            updates[name] = value
    return type(entity).model_validate({**entity.model_dump(), **updates})


class FileSystemFormStore:
    """Filesystem-based FormStore implementation.

    Passes ``isinstance(store, FormStore)``.
    """

    def __init__(self, base_path: str) -> None:
        """Initialize the store.

        Args:
            base_path: Root directory for form files.
                Created if it does not exist.
        """
        self._files: _JsonDirectory[Form] = _JsonDirectory(base_path, Form, "Form")

    def create(self, form: Form) -> Form:
        with self._files.lock:
            if self._files.exists(form.id):
                raise self._files.conflict(form.id)
            self._files.write(form.id, form)
        logger.info("formkit.store.form_created", extra={"form_id": form.id})
        return form

    def get(self, form_id: str) -> Form | None:
        return self._files.read(form_id)

    def update(self, form_id: str, changes: dict[str, Any]) -> Form:
        """Apply a partial update; bumps ``version`` and ``last_modified``."""
        with self._files.lock:
            form = self._files.read_required(form_id)
            updated = _merge(form, changes, protected={"id", "version", "date_added"})
            updated = updated.model_copy(
                update={
                    "version": form.version + 1,
                    "last_modified": datetime.now(timezone.utc),
                }
            )
            self._files.write(form_id, updated)
        return updated

    def delete(self, form_id: str) -> None:
        with self._files.lock:
            self._files.remove(form_id)
        logger.info("formkit.store.form_deleted", extra={"form_id": form_id})

    def list(self) -> list[Form]:
        """All forms, most recently added first."""
        forms = self._files.read_all()
        forms.sort(key=lambda f: f.date_added, reverse=True)
        return forms

    def toggle_favorite(self, form_id: str, is_favorite: bool) -> Form:
        return self.update(form_id, {"is_favorite": is_favorite})


class FileSystemProfileStore:
    """Filesystem-based ProfileStore implementation.

    Passes ``isinstance(store, ProfileStore)``.
    """

    def __init__(self, base_path: str) -> None:
        self._files: _JsonDirectory[AutofillProfile] = _JsonDirectory(
            base_path, AutofillProfile, "Profile"
        )

    def create(self, profile: AutofillProfile) -> AutofillProfile:
        with self._files.lock:
            if self._files.exists(profile.id):
                raise self._files.conflict(profile.id)
            self._files.write(profile.id, profile)
        return profile

    def get(self, profile_id: str) -> AutofillProfile | None:
        return self._files.read(profile_id)

    def update(self, profile_id: str, changes: dict[str, Any]) -> AutofillProfile:
        """Apply a partial update; a ``fields`` key replaces the field list."""
        with self._files.lock:
            profile = self._files.read_required(profile_id)
            updated = _merge(profile, changes, protected={"id"})
            updated = updated.model_copy(
                update={"last_updated": datetime.now(timezone.utc)}
            )
            self._files.write(profile_id, updated)
        return updated

    def delete(self, profile_id: str) -> None:
        with self._files.lock:
            self._files.remove(profile_id)

    def list(self) -> list[AutofillProfile]:
        """All profiles ordered by name."""
        profiles = self._files.read_all()
        profiles.sort(key=lambda p: p.name.casefold())
        return profiles
