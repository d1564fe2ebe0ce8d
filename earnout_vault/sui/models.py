from dataclasses import dataclass, field
from enum import Enum

from earnout_vault.sui.bcs import normalize_address


class DealRole(str, Enum):
    BUYER = "buyer"
    SELLER = "seller"
    AUDITOR = "auditor"


class DealStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class BlobReference:
    """A blob registered on a deal record, in upload order."""

    blob_id: str
    period_id: str
    data_type: str
    size: int
    uploaded_at: str  # ISO-8601, UTC
    uploader_address: str


@dataclass(frozen=True)
class AuditRecord:
    """On-ledger attestation that a document was submitted for audit."""

    id: str
    data_id: str  # blob id the record attests to
    deal_id: str
    period_id: str
    uploader: str
    upload_timestamp: int  # ms
    audited: bool
    auditor: str | None = None
    audit_timestamp: int | None = None


@dataclass(frozen=True)
class Deal:
    """Read-only view of a deal record."""

    deal_id: str
    name: str
    buyer: str
    seller: str
    auditor: str
    currency: str
    status: DealStatus
    kpi_target: int
    contingent_consideration: int
    overhead_allocation_percentage: int
    blobs: list[BlobReference] = field(default_factory=list)

    def role_of(self, address: str) -> DealRole | None:
        """Return the role *address* holds in this deal."""
        return participant_role(
            address, buyer=self.buyer, seller=self.seller, auditor=self.auditor
        )


def participant_role(
    address: str, *, buyer: str, seller: str, auditor: str
) -> DealRole | None:
    """Match *address* against the participants, checking buyer, seller, auditor in order."""
    wanted = normalize_address(address)
    for role, holder in (
        (DealRole.BUYER, buyer),
        (DealRole.SELLER, seller),
        (DealRole.AUDITOR, auditor),
    ):
        if holder and normalize_address(holder) == wanted:
            return role
    return None
