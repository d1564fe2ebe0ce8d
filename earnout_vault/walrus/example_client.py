"""In-memory storage client.

No network calls. Useful for local development and tests, and as a
template for building other storage clients.
"""

import base64
import hashlib
from typing import Any

from earnout_vault.walrus.client_base import BaseStorageClient, storage_units
from earnout_vault.walrus.exceptions import StorageError
from earnout_vault.walrus.models import StorageCost, WrittenBlob


class InMemoryStorageClient(BaseStorageClient):
    """Dictionary-backed client with content-derived blob ids."""

    def __init__(
        self,
        *,
        epoch: int = 1,
        storage_price_per_unit: int = 100_000,
        write_price_per_unit: int = 20_000,
    ) -> None:
        self._blobs: dict[str, bytes] = {}
        self._epoch = epoch
        self._storage_price_per_unit = storage_price_per_unit
        self._write_price_per_unit = write_price_per_unit

    def advance_epoch(self, epochs: int = 1) -> None:
        self._epoch += epochs

    def write_blob(
        self,
        data: bytes,
        *,
        epochs: int,
        deletable: bool,
        owner_address: str,
    ) -> WrittenBlob:
        digest = hashlib.blake2b(data, digest_size=32).digest()
        blob_id = base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")
        self._blobs[blob_id] = bytes(data)
        return WrittenBlob(
            blob_id=blob_id,
            certificate={
                "blobId": blob_id,
                "certifiedEpoch": self._epoch,
                "endEpoch": self._epoch + epochs,
                "deletable": deletable,
                "owner": owner_address,
            },
        )

    def read_blob(self, blob_id: str) -> bytes:
        if blob_id not in self._blobs:
            raise StorageError(f"Blob not found or unavailable: {blob_id}")
        return self._blobs[blob_id]

    def get_blob_metadata(self, blob_id: str) -> dict[str, Any]:
        data = self.read_blob(blob_id)
        digest = hashlib.sha256(data).digest()
        return {
            "metadata": {
                "V1": {
                    "encoding_type": "RS2",
                    "unencoded_length": str(len(data)),
                    "hashes": [
                        {
                            "primary_hash": {"$kind": "Digest", "Digest": list(digest)},
                            "secondary_hash": {"$kind": "Digest", "Digest": list(digest)},
                        }
                    ],
                }
            }
        }

    def current_epoch(self) -> int:
        return self._epoch

    def storage_cost(self, size: int, epochs: int) -> StorageCost:
        units = storage_units(size)
        return StorageCost(
            storage_cost=units * self._storage_price_per_unit * epochs,
            write_cost=units * self._write_price_per_unit,
        )
