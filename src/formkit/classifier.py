"""Extension-based document classification.

The extension is trusted: no magic-byte sniffing is performed.
"""

from __future__ import annotations

from formkit.models import DocumentKind

_KIND_BY_EXTENSION: dict[str, DocumentKind] = {
    "pdf": DocumentKind.PDF,
    "docx": DocumentKind.WORD,
    "doc": DocumentKind.WORD,
    "xlsx": DocumentKind.SPREADSHEET,
    "xls": DocumentKind.SPREADSHEET,
}

SUPPORTED_EXTENSIONS = frozenset(_KIND_BY_EXTENSION)


def extension_of(file_name: str) -> str:
    """Return the lowercase text after the last ``.``, or ``""`` if there is none."""
    base = file_name.replace("\\", "/").rsplit("/", 1)[-1]
    if "." not in base:
        return ""
    return base.rsplit(".", 1)[-1].lower()


def strip_extension(file_name: str) -> str:
    """Return the base file name without its final extension."""
    base = file_name.replace("\\", "/").rsplit("/", 1)[-1]
    if "." not in base:
        return base
    stem = base.rsplit(".", 1)[0]
    return stem or base


def classify(file_name: str) -> DocumentKind:
    """Map a file name to its DocumentKind; unknown extensions give UNKNOWN."""
    return _KIND_BY_EXTENSION.get(extension_of(file_name), DocumentKind.UNKNOWN)
