"""Preview handles: revocable, file-backed previews of uploaded bytes.

The router acquires one handle per processed document; the caller releases
it when the preview is no longer displayed.  ``PreviewStore`` is the only
state shared between concurrent ``process`` calls, so every operation is
guarded by a lock and each handle is released independently.
"""

from __future__ import annotations

import logging
import os
import tempfile
import threading
import uuid
from pathlib import Path

from pydantic import BaseModel

from formkit.classifier import extension_of

logger = logging.getLogger("formkit")


class PreviewHandle(BaseModel):
    """Opaque reference to a renderable copy of an uploaded file."""

    handle_id: str
    url: str
    path: str


class PreviewStore:
    """Allocates and revokes preview files under a single directory.

    Args:
        base_dir: Directory for preview files.  A private temporary
            directory is created when None.
    """

    def __init__(self, base_dir: str | None = None) -> None:
        if base_dir is None:
            self._base_dir = Path(tempfile.mkdtemp(prefix="formkit-preview-"))
        else:
            self._base_dir = Path(base_dir)
            self._base_dir.mkdir(parents=True, exist_ok=True)
        self._handles: dict[str, PreviewHandle] = {}
        self._lock = threading.Lock()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def acquire(self, data: bytes, file_name: str) -> PreviewHandle:
        """Write *data* to a new preview file and register its handle."""
        handle_id = str(uuid.uuid4())
        extension = extension_of(file_name)
        suffix = f".{extension}" if extension else ""
        path = self._base_dir / f"{handle_id}{suffix}"
        path.write_bytes(data)
        handle = PreviewHandle(handle_id=handle_id, url=path.as_uri(), path=str(path))
        with self._lock:
            self._handles[handle_id] = handle
        logger.debug("formkit.preview.acquired", extra={"handle_id": handle_id})
        return handle

    def get(self, handle_id: str) -> PreviewHandle | None:
        with self._lock:
            return self._handles.get(handle_id)

    def release(self, handle_id: str) -> bool:
        """Revoke a handle and delete its file.

        Returns False when the handle is unknown or was already released.
        """
        with self._lock:
            handle = self._handles.pop(handle_id, None)
        if handle is None:
            return False
        try:
            os.remove(handle.path)
        except FileNotFoundError:
            pass
        logger.debug("formkit.preview.released", extra={"handle_id": handle_id})
        return True

    def release_all(self) -> int:
        """Revoke every outstanding handle. Returns how many were released."""
        with self._lock:
            handle_ids = list(self._handles)
        return sum(1 for h in handle_ids if self.release(h))

    @property
    def active_count(self) -> int:
        with self._lock:
            return len(self._handles)
