"""Upload and download workflow for deal documents.

Upload:   encrypt -> store ciphertext.
Download: verify access -> fetch ciphertext -> decrypt.
"""

from earnout_vault.access.verifier import AccessVerifier
from earnout_vault.documents.exceptions import AccessDeniedError
from earnout_vault.documents.models import DocumentStatus, StoredDocument
from earnout_vault.logging.logger import Log
from earnout_vault.seal.encryption import EncryptionAdapter
from earnout_vault.seal.models import EncryptionConfig
from earnout_vault.sui.ledger import LedgerQueryAdapter
from earnout_vault.sui.models import DealRole
from earnout_vault.walrus.models import BlobMetadata
from earnout_vault.walrus.storage import BlobStorageAdapter


class DealDocumentService:
    """Orchestrates encryption, storage, ledger lookups and access checks for deal documents."""

    def __init__(
        self,
        *,
        encryption: EncryptionAdapter,
        storage: BlobStorageAdapter,
        ledger: LedgerQueryAdapter,
        verifier: AccessVerifier,
    ) -> None:
        self._encryption = encryption
        self._storage = storage
        self._ledger = ledger
        self._verifier = verifier

    def upload_document(self, plaintext: bytes, metadata: BlobMetadata) -> StoredDocument:
        """Encrypt *plaintext* under the deal's identity and store the ciphertext."""
        Log.info(
            f"Uploading document for deal {metadata.deal_id}",
            period_id=metadata.period_id,
            data_type=metadata.data_type,
            size=len(plaintext),
        )
        encrypted = self._encryption.encrypt(
            plaintext,
            EncryptionConfig(deal_id=metadata.deal_id, period_id=metadata.period_id),
        )
        upload = self._storage.upload(encrypted.ciphertext, metadata)
        return StoredDocument(
            upload=upload,
            encryption_commitment=encrypted.commitment,
            policy_object_id=encrypted.policy_object_id,
        )

    def download_document(
        self,
        deal_id: str,
        blob_id: str,
        user_address: str,
        required_role: DealRole | None = None,
    ) -> bytes:
        """Return the plaintext of a stored document.

        Raises:
            AccessDeniedError: if *user_address* may not read the deal's documents.
        """
        decision = self._verifier.verify_access(deal_id, user_address, required_role)
        if not decision.has_access:
            Log.warning(
                f"Download denied: {decision.reason}", deal_id=deal_id, blob_id=blob_id
            )
            raise AccessDeniedError(decision.reason or "access denied")

        ciphertext = self._storage.download(blob_id)
        result = self._encryption.decrypt(ciphertext, deal_id, user_address)
        Log.info(
            f"Downloaded document {blob_id}",
            deal_id=deal_id,
            role=decision.role.value if decision.role else "bypass",
        )
        return result.plaintext

    def list_documents(self, deal_id: str) -> list[DocumentStatus]:
        """Registered blobs of a deal, in upload order, with their audit records."""
        references = self._ledger.get_deal_blob_references(deal_id)
        if not references:
            return []
        records = {record.data_id: record for record in self._ledger.get_deal_audit_records(deal_id)}
        return [
            DocumentStatus(reference=ref, audit_record=records.get(ref.blob_id))
            for ref in references
        ]
