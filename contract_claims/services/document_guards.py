"""
Document Intake Guards.

Checks every supporting document before it is attached to a claim:

1. **Extension allow-list**: only ``pdf``, ``docx`` and ``xlsx`` by default.
2. **Size cap**: at most 5 MiB by default.

Both limits come from ``AppConfig``.  A rejected document raises
``InvalidArgumentError`` before anything is written to the store.
"""

from __future__ import annotations

from pathlib import PurePath

from pydantic import ValidationError

from contract_claims.config import AppConfig
from contract_claims.exceptions import InvalidArgumentError
from contract_claims.logger import StructuredLogger
from contract_claims.models.service_models import DocumentUpload
from contract_claims.services.base_service import BaseService


class DocumentGuardsService(BaseService):
    """Intake validation for supporting documents.

    Parameters
    ----------
    config:
        Application configuration (size cap and extension allow-list).
    logger:
        Structured logger instance.
    """

    def __init__(self, config: AppConfig, logger: StructuredLogger) -> None:
        super().__init__(logger)
        self._config = config

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def max_bytes(self) -> int:
        return self._config.MAX_DOCUMENT_BYTES

    @property
    def allowed_extensions(self) -> frozenset[str]:
        return self._config.ALLOWED_DOCUMENT_EXTENSIONS

    def extension_of(self, file_name: str) -> str:
        """Lower-case extension of *file_name* without the dot (``""`` if none)."""
        return PurePath(file_name).suffix.lower().lstrip(".")

    def is_allowed_extension(self, file_name: str) -> bool:
        return self.extension_of(file_name) in self.allowed_extensions

    def check_document(self, document: DocumentUpload | dict[str, object]) -> DocumentUpload:
        """Validate one document and return it as a ``DocumentUpload``.

        Check order: metadata shape → extension → size.

        Raises
        ------
        InvalidArgumentError
            If the metadata is malformed, the extension is not allowed,
            or the file is larger than the configured cap.
        """
        if isinstance(document, dict):
            try:
                document = DocumentUpload.model_validate(document)
            except ValidationError as exc:
                raise InvalidArgumentError(
                    f"Invalid document metadata: {exc.errors()[0]['msg']}",
                    argument="documents",
                ) from exc

        if not document.file_name.strip():
            raise InvalidArgumentError(
                "Document file name is required.", argument="documents"
            )

        if not self.is_allowed_extension(document.file_name):
            allowed = ", ".join(f".{ext}" for ext in sorted(self.allowed_extensions))
            self._logger.warning(
                "Rejected document %s: extension not allowed.", document.file_name
            )
            raise InvalidArgumentError(
                f"File type of '{document.file_name}' is not allowed. "
                f"Allowed types: {allowed}.",
                argument="documents",
            )

        if document.size_bytes > self.max_bytes:
            self._logger.warning(
                "Rejected document %s: %d bytes exceeds %d.",
                document.file_name,
                document.size_bytes,
                self.max_bytes,
            )
            raise InvalidArgumentError(
                f"'{document.file_name}' is {document.size_bytes} bytes; "
                f"the maximum is {self.max_bytes} bytes.",
                argument="documents",
            )

        return document

    def check_documents(
        self,
        documents: list[DocumentUpload | dict[str, object]],
    ) -> list[DocumentUpload]:
        """Validate every document; the first failure aborts the batch."""
        return [self.check_document(document) for document in documents]
