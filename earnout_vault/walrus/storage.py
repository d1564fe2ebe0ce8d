"""Blob storage adapter: size/credential checks, upload, download, metadata."""

import json
import re
from datetime import datetime, timezone
from typing import Any, ClassVar

from earnout_vault.errors import ConfigurationError, ValidationError
from earnout_vault.logging.logger import Log
from earnout_vault.sui.keys import Ed25519Keypair
from earnout_vault.walrus.client_base import BaseStorageClient
from earnout_vault.walrus.exceptions import StorageError
from earnout_vault.walrus.models import BlobInfo, BlobMetadata, StorageCost, UploadResult

UNKNOWN_COMMITMENT = "walrus:unknown"


def format_certificate_commitment(certificate: Any) -> str:
    """Network-attested commitment: ``walrus:`` + first 64 chars of the serialized certificate."""
    serialized = json.dumps(certificate, separators=(",", ":"), sort_keys=True, default=str)
    return f"walrus:{serialized[:64]}"


def format_metadata_commitment(metadata: Any) -> str:
    """Extract the primary digest from blob metadata.

    Only a primary hash whose discriminant is ``Digest`` is recognized;
    any other shape yields ``walrus:unknown``.
    """
    try:
        hashes = metadata["metadata"]["V1"]["hashes"]
        primary_hash = hashes[0]["primary_hash"] if hashes else None
    except (KeyError, IndexError, TypeError):
        return UNKNOWN_COMMITMENT

    if not isinstance(primary_hash, dict) or primary_hash.get("$kind") != "Digest":
        return UNKNOWN_COMMITMENT

    digest = primary_hash.get("Digest")
    try:
        if isinstance(digest, str):
            hash_hex = bytes.fromhex(digest.removeprefix("0x")).hex()
        elif isinstance(digest, (list, tuple, bytes, bytearray)):
            hash_hex = bytes(digest).hex()
        else:
            hash_hex = ""
    except (TypeError, ValueError):
        Log.warning("Unrecognized digest encoding in blob metadata")
        return UNKNOWN_COMMITMENT
    if not hash_hex:
        return UNKNOWN_COMMITMENT
    return f"walrus:{hash_hex}"


class BlobStorageAdapter:
    """Persists opaque payloads on the storage network through a relay client.

    Retention end epochs are computed from the network's live epoch on every
    call. No retries are performed here.
    """

    _BLOB_ID_RE: ClassVar[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9_-]+$")

    def __init__(
        self,
        client: BaseStorageClient,
        *,
        keypair: Ed25519Keypair | None,
        storage_epochs: int,
        max_file_size: int,
    ) -> None:
        self._client = client
        self._keypair = keypair
        self._storage_epochs = storage_epochs
        self._max_file_size = max_file_size

    def upload(self, data: bytes, metadata: BlobMetadata) -> UploadResult:
        """Store *data* for the configured retention period.

        Raises:
            ValidationError: if the payload reaches the configured maximum size.
            ConfigurationError: if no signing credential is configured.
            StorageError: on any storage network failure.
        """
        if len(data) >= self._max_file_size:
            raise ValidationError(
                f"File size {len(data)} exceeds maximum allowed "
                f"{self._max_file_size} bytes"
            )
        if self._keypair is None:
            raise ConfigurationError("Backend keypair not configured for Walrus uploads")

        Log.debug(
            "Uploading to Walrus via relay",
            deal_id=metadata.deal_id,
            period_id=metadata.period_id,
            size=len(data),
            epochs=self._storage_epochs,
        )
        try:
            written = self._client.write_blob(
                data,
                epochs=self._storage_epochs,
                deletable=True,
                owner_address=self._keypair.to_sui_address(),
            )
            if not written.blob_id:
                raise StorageError("storage network returned no blob id")
            current_epoch = self._client.current_epoch()
        except Exception as exc:
            Log.error(f"Walrus upload failed: {exc}", deal_id=metadata.deal_id)
            raise StorageError(f"Failed to upload to Walrus: {exc}") from exc

        result = UploadResult(
            blob_id=written.blob_id,
            commitment=format_certificate_commitment(written.certificate),
            size=len(data),
            uploaded_at=datetime.now(timezone.utc).isoformat(),
            storage_epochs=self._storage_epochs,
            start_epoch=current_epoch,
            end_epoch=current_epoch + self._storage_epochs,
        )
        Log.info(
            "Upload successful",
            blob_id=result.blob_id,
            size=result.size,
            end_epoch=result.end_epoch,
        )
        return result

    def download(self, blob_id: str) -> bytes:
        """Fetch stored bytes.

        Raises:
            ValidationError: if *blob_id* is malformed.
            StorageError: if the blob is unknown or unavailable.
        """
        self._validate_blob_id(blob_id)
        try:
            data = self._client.read_blob(blob_id)
        except Exception as exc:
            Log.error(f"Walrus download failed: {exc}", blob_id=blob_id)
            raise StorageError(f"Failed to download from Walrus: {exc}") from exc
        Log.info("Download successful", blob_id=blob_id, size=len(data))
        return data

    def get_blob_info(self, blob_id: str) -> BlobInfo:
        """Return size and metadata-derived commitment for a stored blob.

        Raises:
            ValidationError: if *blob_id* is malformed.
            StorageError: if the metadata cannot be fetched.
        """
        self._validate_blob_id(blob_id)
        try:
            metadata = self._client.get_blob_metadata(blob_id)
            size = int(metadata["metadata"]["V1"]["unencoded_length"])
            current_epoch = self._client.current_epoch()
        except Exception as exc:
            Log.error(f"Failed to get blob info: {exc}", blob_id=blob_id)
            raise StorageError(f"Failed to get blob info: {exc}") from exc

        return BlobInfo(
            blob_id=blob_id,
            size=size,
            commitment=format_metadata_commitment(metadata),
            current_epoch=current_epoch,
        )

    def calculate_storage_cost(self, size: int, epochs: int | None = None) -> StorageCost:
        """Quote storage cost; *epochs* defaults to the configured retention."""
        if size < 0:
            raise ValidationError(f"Size must not be negative, got {size}")
        epochs = self._storage_epochs if epochs is None else epochs
        try:
            cost = self._client.storage_cost(size, epochs)
        except Exception as exc:
            Log.error(f"Failed to calculate storage cost: {exc}")
            raise StorageError(f"Failed to calculate storage cost: {exc}") from exc
        Log.debug("Storage cost calculated", size=size, epochs=epochs, total=cost.total_cost)
        return cost

    def _validate_blob_id(self, blob_id: str) -> None:
        if not self._BLOB_ID_RE.match(blob_id or ""):
            raise ValidationError(f"Malformed blob id: {blob_id!r}")
