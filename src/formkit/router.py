"""DocumentRouter: the single entry point of the extraction pipeline.

Routes an uploaded file through:

1. Classification by extension (:func:`classify`).
2. Preview handle allocation (:class:`PreviewStore`).
3. Dispatch to the extractor registered for the document kind.
4. Field normalization (:func:`normalize_fields`).
5. Assembly of the :class:`ProcessedDocument`.

Unsupported extensions fail before any byte is parsed.  Parse failures
propagate unchanged after the preview handle has been released.
"""

from __future__ import annotations

import asyncio
import logging
import os
import threading
import time
from collections.abc import Mapping, Sequence

from formkit.classifier import classify, strip_extension
from formkit.config import FormKitConfig
from formkit.errors import (
    ErrorCode,
    ExtractionTimeoutError,
    FormKitError,
    FormKitException,
    UnsupportedFileTypeError,
)
from formkit.extractors import (
    PDFFieldExtractor,
    SpreadsheetFieldExtractor,
    WordFieldExtractor,
)
from formkit.models import (
    BatchItemResult,
    DocumentInput,
    DocumentKind,
    DocumentMetadata,
    ProcessedDocument,
)
from formkit.normalizer import normalize_fields
from formkit.preview import PreviewStore
from formkit.protocols import DocumentExtractor

logger = logging.getLogger("formkit")


class DocumentRouter:
    """Orchestrates classification, extraction and normalization.

    Holds no per-call state: concurrent ``process`` calls share only the
    preview store, which is thread-safe.

    Parameters
    ----------
    config:
        Pipeline configuration.  Uses defaults when *None*.
    preview_store:
        Allocator for preview handles.  A store under
        ``config.preview_dir`` is created when *None*.
    extractors:
        Optional per-kind overrides of the built-in extractors.
    """

    def __init__(
        self,
        config: FormKitConfig | None = None,
        preview_store: PreviewStore | None = None,
        extractors: Mapping[DocumentKind, DocumentExtractor] | None = None,
    ) -> None:
        self._config = config or FormKitConfig()
        self._preview_store = preview_store or PreviewStore(self._config.preview_dir)
        self._extractors: dict[DocumentKind, DocumentExtractor] = {
            DocumentKind.PDF: PDFFieldExtractor(self._config),
            DocumentKind.WORD: WordFieldExtractor(self._config),
            DocumentKind.SPREADSHEET: SpreadsheetFieldExtractor(self._config),
        }
        if extractors:
            self._extractors.update(extractors)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def preview_store(self) -> PreviewStore:
        return self._preview_store

    def can_handle(self, file_name: str) -> bool:
        """Return True if the file name has a supported extension."""
        return classify(file_name) != DocumentKind.UNKNOWN

    def process(self, file_name: str, data: bytes) -> ProcessedDocument:
        """Extract and normalize the fields of one document.

        Raises:
            UnsupportedFileTypeError: Extension not recognized; nothing parsed.
            DocumentParseError: The bytes are not a valid document of their kind.
        """
        t0 = time.monotonic()
        kind = classify(file_name)
        if kind == DocumentKind.UNKNOWN:
            logger.warning(
                "formkit.process.unsupported",
                extra={"file_name": file_name},
            )
            raise UnsupportedFileTypeError(
                message=(
                    f"Unsupported file type for '{file_name}'. "
                    f"{UnsupportedFileTypeError.user_message}"
                ),
                stage="classification",
                file_name=file_name,
            )

        handle = self._preview_store.acquire(data, file_name)
        try:
            output = self._extractors[kind].extract(data, file_name)
            fields = normalize_fields(output.fields, self._config)
        except Exception as exc:
            self._preview_store.release(handle.handle_id)
            logger.error(
                "formkit.process.failed",
                extra={
                    "file_name": file_name,
                    "kind": kind.value,
                    "error_code": getattr(exc, "code", type(exc).__name__),
                },
            )
            raise

        warnings = list(output.warnings)
        if not fields:
            warnings.append(
                FormKitError(
                    code=ErrorCode.W_EMPTY_RESULT,
                    message="No fields detected; fields can be added manually",
                    stage="extraction",
                    recoverable=True,
                    file_name=file_name,
                )
            )

        pages = output.page_count if kind == DocumentKind.PDF else None
        metadata = DocumentMetadata(
            title=output.title or strip_extension(file_name),
            author=output.author,
            subject=output.subject,
            created=output.created,
            modified=output.modified,
            page_count=pages,
            fields_count=len(fields),
        )

        document = ProcessedDocument(
            kind=kind,
            file_name=file_name,
            fields=fields,
            preview_url=handle.url,
            preview_id=handle.handle_id,
            pages=pages,
            metadata=metadata,
            raw_text=output.raw_text if kind == DocumentKind.WORD else None,
            warnings=warnings,
        )

        logger.info(
            "formkit.process.completed",
            extra={
                "file_name": file_name,
                "kind": kind.value,
                "field_count": len(fields),
                "pages": pages,
                "warnings": [w.code.value for w in warnings],
                "duration_ms": (time.monotonic() - t0) * 1000.0,
            },
        )
        return document

    def process_file(self, file_path: str) -> ProcessedDocument:
        """Read a file from disk and :meth:`process` it."""
        with open(file_path, "rb") as fh:
            data = fh.read()
        return self.process(os.path.basename(file_path), data)

    def release_preview(self, document: ProcessedDocument) -> bool:
        """Release the preview handle of a document the caller has discarded."""
        return self._preview_store.release(document.preview_id)

    async def aprocess(self, file_name: str, data: bytes) -> ProcessedDocument:
        """Async wrapper around :meth:`process`.

        Offloads the synchronous call to a thread via ``asyncio.to_thread()``.
        When ``per_document_timeout_seconds`` is set and exceeded, raises
        ``ExtractionTimeoutError``.  On timeout or cancellation the
        preview of a late-finishing extraction is released.
        """
        timeout = self._config.per_document_timeout_seconds
        state_lock = threading.Lock()
        abandoned = False
        finished: list[ProcessedDocument] = []

        def _run() -> ProcessedDocument:
            document = self.process(file_name, data)
            with state_lock:
                if abandoned:
                    self._preview_store.release(document.preview_id)
                else:
                    finished.append(document)
            return document

        def _abandon() -> None:
            nonlocal abandoned
            with state_lock:
                abandoned = True
                for document in finished:
                    self._preview_store.release(document.preview_id)

        try:
            if timeout is None:
                return await asyncio.to_thread(_run)
            return await asyncio.wait_for(asyncio.to_thread(_run), timeout)
        except asyncio.TimeoutError as exc:
            _abandon()
            logger.warning(
                "formkit.process.timeout",
                extra={"file_name": file_name, "timeout_seconds": timeout},
            )
            raise ExtractionTimeoutError(
                message=f"Extraction of '{file_name}' exceeded {timeout}s",
                stage="extraction",
                recoverable=True,
                file_name=file_name,
            ) from exc
        except asyncio.CancelledError:
            _abandon()
            raise

    async def aprocess_batch(
        self,
        inputs: Sequence[DocumentInput],
    ) -> list[BatchItemResult]:
        """Process several files with at most ``batch_concurrency`` in flight.

        Each file's outcome is independent: a failing file yields a
        ``BatchItemResult`` carrying its error and does not affect the
        others.  Results are returned in input order.
        """
        semaphore = asyncio.Semaphore(self._config.batch_concurrency)

        async def _one(item: DocumentInput) -> BatchItemResult:
            async with semaphore:
                try:
                    document = await self.aprocess(item.file_name, item.data)
                except FormKitException as exc:
                    logger.warning(
                        "formkit.batch.item_failed",
                        extra={"file_name": item.file_name, "error_code": exc.code.value},
                    )
                    return BatchItemResult(file_name=item.file_name, error=exc.error)
                return BatchItemResult(file_name=item.file_name, document=document)

        results = await asyncio.gather(*(_one(item) for item in inputs))
        succeeded = sum(1 for r in results if r.ok)
        logger.info(
            "formkit.batch.completed",
            extra={"total": len(results), "succeeded": succeeded},
        )
        return list(results)


def create_default_router(
    *,
    config: FormKitConfig | None = None,
    preview_store: PreviewStore | None = None,
) -> DocumentRouter:
    """Create a DocumentRouter with the built-in extractors."""
    return DocumentRouter(config=config, preview_store=preview_store)
