"""
Supporting Document Repository.

Document metadata attached to a claim at submission.  Only metadata is
stored; file bytes are the caller's concern.
"""

from __future__ import annotations

from contract_claims.models.claim import SupportingDocument
from contract_claims.models.service_models import DocumentUpload
from contract_claims.repositories.base_repository import BaseRepository


class SupportingDocumentRepository(BaseRepository[SupportingDocument]):
    """Data access layer for SupportingDocument entries."""

    COLLECTION = "supporting_documents"

    def create_for_claim(
        self,
        claim_id: int,
        uploads: list[DocumentUpload],
    ) -> list[SupportingDocument]:
        """Assign fresh ids to *uploads* and link them to *claim_id*."""
        created: list[SupportingDocument] = []
        with self._store.write_lock:
            for upload in uploads:
                record = SupportingDocument(
                    id=self._store.next_id(self.COLLECTION),
                    claim_id=claim_id,
                    file_name=upload.file_name,
                    file_path=upload.file_path,
                )
                created.append(self.add(record))
        return created

    def get_by_claim(self, claim_id: int) -> list[SupportingDocument]:
        return self._select(lambda d: d.claim_id == claim_id)
