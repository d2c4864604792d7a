"""Autofill: pre-populate extracted fields from a saved profile.

A profile entry matches a field when its id equals the field id, or when
its name equals the field label ignoring case and surrounding whitespace.
Id matches take precedence over label matches.
"""

from __future__ import annotations

import logging

from formkit.models import AutofillProfile, ExtractedField, FieldType

logger = logging.getLogger("formkit")

_TRUE_VALUES = frozenset({"true", "yes", "on", "1", "x"})


def match_profile(
    fields: list[ExtractedField],
    profile: AutofillProfile,
) -> dict[str, str]:
    """Return ``{field_id: value}`` for every field the profile can fill."""
    by_id: dict[str, str] = {}
    by_folded: dict[str, str] = {}
    for entry in profile.fields:
        by_id.setdefault(entry.id, entry.value)
        by_folded.setdefault(entry.name.strip().casefold(), entry.value)

    matches: dict[str, str] = {}
    for field in fields:
        if field.id in by_id:
            matches[field.id] = by_id[field.id]
            continue
        folded = field.label.strip().casefold()
        if folded in by_folded:
            matches[field.id] = by_folded[folded]

    logger.debug(
        "formkit.autofill.matched",
        extra={"profile_id": profile.id, "matched": len(matches), "total": len(fields)},
    )
    return matches


def _coerce(field: ExtractedField, value: str) -> str | float | bool | None:
    if field.type == FieldType.CHECKBOX:
        return value.strip().lower() in _TRUE_VALUES
    if field.type == FieldType.NUMBER:
        try:
            return float(value)
        except ValueError:
            return value
    if field.type == FieldType.SELECT and field.options and value not in field.options:
        return None
    return value


def apply_profile(
    fields: list[ExtractedField],
    profile: AutofillProfile,
) -> list[ExtractedField]:
    """Return copies of *fields* with matched profile values as defaults.

    Values are coerced to the field type; a select value outside the
    field's options leaves the field unchanged.
    """
    matches = match_profile(fields, profile)
    filled: list[ExtractedField] = []
    for field in fields:
        if field.id in matches:
            value = _coerce(field, matches[field.id])
            if value is not None:
                field = field.model_copy(update={"default_value": value})
        filled.append(field)
    return filled
