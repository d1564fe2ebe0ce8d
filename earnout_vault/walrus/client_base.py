from abc import ABC, abstractmethod
from typing import Any

from earnout_vault.walrus.models import StorageCost, WrittenBlob

STORAGE_UNIT_BYTES = 1024 * 1024


def storage_units(size: int) -> int:
    """Number of 1 MiB storage units needed for *size* bytes (at least one)."""
    return max(1, -(-size // STORAGE_UNIT_BYTES))


class BaseStorageClient(ABC):
    """Contract for decentralized blob-storage clients."""

    @abstractmethod
    def write_blob(
        self,
        data: bytes,
        *,
        epochs: int,
        deletable: bool,
        owner_address: str,
    ) -> WrittenBlob:
        """Store *data* for *epochs* and return its identifier and certificate."""

    @abstractmethod
    def read_blob(self, blob_id: str) -> bytes:
        """Return the stored bytes for *blob_id*."""

    @abstractmethod
    def get_blob_metadata(self, blob_id: str) -> dict[str, Any]:
        """Return the network metadata document for *blob_id*.

        Shape: ``{"metadata": {"V1": {"unencoded_length": ..., "hashes": [...]}}}``.
        """

    @abstractmethod
    def current_epoch(self) -> int:
        """Return the network's live epoch counter."""

    @abstractmethod
    def storage_cost(self, size: int, epochs: int) -> StorageCost:
        """Quote the cost of storing *size* bytes for *epochs*."""

    def close(self) -> None:
        """Release network resources held by the client."""
