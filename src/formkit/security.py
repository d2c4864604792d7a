"""Upload validation applied by callers before handing files to the router.

The router trusts the extension and does not enforce a size limit; the
upload widget runs ``UploadValidator`` first so oversized or unsupported
files are rejected with a structured error instead of being parsed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from formkit.classifier import SUPPORTED_EXTENSIONS, extension_of
from formkit.errors import ErrorCode, FormKitError

if TYPE_CHECKING:
    from formkit.config import FormKitConfig

logger = logging.getLogger("formkit")


class UploadValidator:
    """Checks extension, emptiness and size of an upload.

    All checks are fail-fast: the first fatal error stops further checks.
    """

    def __init__(self, config: FormKitConfig) -> None:
        self._config = config

    def check(self, file_name: str, size: int) -> list[FormKitError]:
        """Return the errors for an upload (empty if it is acceptable)."""
        extension = extension_of(file_name)
        if extension not in SUPPORTED_EXTENSIONS:
            return [
                FormKitError(
                    code=ErrorCode.E_UPLOAD_BAD_EXTENSION,
                    message=(
                        f"File extension '.{extension}' is not allowed. "
                        f"Allowed: {sorted(SUPPORTED_EXTENSIONS)}"
                    ),
                    stage="upload",
                    file_name=file_name,
                )
            ]

        if size == 0:
            return [
                FormKitError(
                    code=ErrorCode.E_UPLOAD_EMPTY,
                    message="File is empty (0 bytes)",
                    stage="upload",
                    file_name=file_name,
                )
            ]

        max_bytes = self._config.max_file_size_mb * 1024 * 1024
        if size > max_bytes:
            logger.info(
                "formkit.upload.rejected_size",
                extra={"file_name": file_name, "size": size},
            )
            return [
                FormKitError(
                    code=ErrorCode.E_UPLOAD_TOO_LARGE,
                    message=(
                        f"File size {size} bytes exceeds limit of "
                        f"{self._config.max_file_size_mb} MB"
                    ),
                    stage="upload",
                    file_name=file_name,
                )
            ]

        return []
