import os

from earnout_vault.sui.keys import Ed25519Keypair
from earnout_vault.walrus.http_client import WalrusHttpClient
from earnout_vault.walrus.models import BlobMetadata
from earnout_vault.walrus.storage import BlobStorageAdapter


def _adapter(client: WalrusHttpClient) -> BlobStorageAdapter:
    return BlobStorageAdapter(
        client,
        keypair=Ed25519Keypair.generate(),
        storage_epochs=1,
        max_file_size=1024 * 1024,
    )


def test_upload_download_round_trip(walrus_client: WalrusHttpClient) -> None:
    adapter = _adapter(walrus_client)
    payload = os.urandom(512)
    metadata = BlobMetadata(deal_id="integration", period_id="p1", data_type="test")

    uploaded = adapter.upload(payload, metadata)

    assert uploaded.blob_id
    assert uploaded.commitment.startswith("walrus:")
    assert uploaded.end_epoch == uploaded.start_epoch + 1
    assert adapter.download(uploaded.blob_id) == payload


def test_blob_info_reports_unencoded_size(walrus_client: WalrusHttpClient) -> None:
    adapter = _adapter(walrus_client)
    payload = os.urandom(256)
    metadata = BlobMetadata(deal_id="integration", period_id="p1", data_type="test")
    uploaded = adapter.upload(payload, metadata)

    info = adapter.get_blob_info(uploaded.blob_id)

    assert info.size == 256
    assert info.current_epoch >= uploaded.start_epoch
