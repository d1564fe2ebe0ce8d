from dataclasses import dataclass

from earnout_vault.sui.models import AuditRecord, BlobReference
from earnout_vault.walrus.models import UploadResult


@dataclass(frozen=True)
class StoredDocument:
    """An encrypted document accepted by storage."""

    upload: UploadResult
    encryption_commitment: str  # sha256:<hex> over the ciphertext
    policy_object_id: str


@dataclass(frozen=True)
class DocumentStatus:
    """A registered blob joined with its audit record, if any."""

    reference: BlobReference
    audit_record: AuditRecord | None = None

    @property
    def audited(self) -> bool:
        return self.audit_record is not None and self.audit_record.audited
