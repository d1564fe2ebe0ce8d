from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class BlobMetadata:
    """Caller-supplied description of an uploaded document."""

    deal_id: str
    period_id: str
    data_type: str
    filename: str = ""
    mime_type: str = "application/octet-stream"
    description: str = ""
    uploader_address: str = ""


@dataclass(frozen=True)
class WrittenBlob:
    """Raw outcome of a storage write: identifier plus network attestation."""

    blob_id: str
    certificate: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UploadResult:
    blob_id: str
    commitment: str  # walrus:<...>
    size: int
    uploaded_at: str
    storage_epochs: int
    start_epoch: int
    end_epoch: int


@dataclass(frozen=True)
class BlobInfo:
    blob_id: str
    size: int
    commitment: str
    current_epoch: int


@dataclass(frozen=True)
class StorageCost:
    """Cost breakdown in the network's smallest coin unit."""

    storage_cost: int
    write_cost: int

    @property
    def total_cost(self) -> int:
        return self.storage_cost + self.write_cost
