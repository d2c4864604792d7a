"""Field normalization: extractor output to the shared ExtractedField schema.

Every extractor reports fields with its own optional-attribute conventions.
``normalize_fields`` fills the gaps so the UI never branches on the source
format, and is idempotent: normalizing its own output changes nothing.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

from formkit.config import FormKitConfig
from formkit.models import ExtractedField, FieldType, RawField

logger = logging.getLogger("formkit")

_NON_WORD_RE = re.compile(r"[^\w]+")

FieldLike = RawField | ExtractedField | Mapping[str, Any]


def field_id_from_label(label: str) -> str:
    """Derive a stable id from label text, e.g. ``'Full Name' -> 'full_name'``."""
    slug = _NON_WORD_RE.sub("_", label.strip().lower()).strip("_")
    return slug or "field"


def _to_raw(item: FieldLike) -> RawField:
    """Coerce any accepted field representation to a RawField."""
    if isinstance(item, RawField):
        return item
    if isinstance(item, ExtractedField):
        data = item.model_dump(exclude={"label"})
        data["name"] = item.label
        return RawField.model_validate(data)
    data = dict(item)
    label = data.pop("label", None)
    if label is not None:
        data["name"] = label
    return RawField.model_validate(data)


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def normalize_fields(
    fields: Iterable[FieldLike],
    config: FormKitConfig | None = None,
) -> list[ExtractedField]:
    """Produce ExtractedField instances that satisfy the schema invariants.

    - ``required`` defaults to ``False``.
    - ``section`` defaults to ``config.default_section``; ``category``
      defaults to the source-supplied section, else ``config.default_category``.
    - ``options`` are dropped unless the type is ``select``; a select
      without options falls back to ``text``.
    - Missing ids are derived from the label; collisions get ``_2``, ``_3``...
      suffixes in source order.
    """
    cfg = config or FormKitConfig()
    seen_ids: set[str] = set()
    normalized: list[ExtractedField] = []

    for item in fields:
        raw = _to_raw(item)
        label = raw.name.strip()

        field_type = raw.type
        options = list(raw.options) if raw.options else None
        if field_type == FieldType.SELECT and not options:
            logger.warning(
                "formkit.normalize.select_without_options",
                extra={"field_label": label},
            )
            field_type = FieldType.TEXT
        if field_type != FieldType.SELECT:
            options = None

        section = cfg.default_section if _blank(raw.section) else raw.section.strip()  # type: ignore[union-attr]
        if not _blank(raw.category):
            category = raw.category.strip()  # type: ignore[union-attr]
        elif not _blank(raw.section):
            category = section
        else:
            category = cfg.default_category

        base_id = field_id_from_label(label) if _blank(raw.id) else raw.id.strip()  # type: ignore[union-attr]
        field_id = base_id
        suffix = 2
        while field_id in seen_ids:
            field_id = f"{base_id}_{suffix}"
            suffix += 1
        if field_id != base_id:
            logger.debug(
                "formkit.normalize.id_disambiguated",
                extra={"base_id": base_id, "field_id": field_id},
            )
        seen_ids.add(field_id)

        normalized.append(
            ExtractedField(
                id=field_id,
                label=label,
                type=field_type,
                required=bool(raw.required) if raw.required is not None else False,
                category=category,
                section=section,
                default_value=raw.default_value,
                options=options,
                validation=raw.validation,
                position=raw.position,
                description=raw.description,
            )
        )

    return normalized
