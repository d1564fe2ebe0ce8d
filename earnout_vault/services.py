from dataclasses import dataclass
from types import TracebackType

from earnout_vault.access.verifier import AccessVerifier
from earnout_vault.config.settings import Settings
from earnout_vault.documents.service import DealDocumentService
from earnout_vault.errors import ConfigurationError
from earnout_vault.logging.logger import Log
from earnout_vault.seal.client_base import BaseSealClient
from earnout_vault.seal.encryption import EncryptionAdapter
from earnout_vault.seal.factory import SealClientFactory
from earnout_vault.seal.models import load_key_server_configs
from earnout_vault.sui.client_base import BaseLedgerClient
from earnout_vault.sui.jsonrpc_client import SuiJsonRpcClient
from earnout_vault.sui.keys import Ed25519Keypair
from earnout_vault.sui.ledger import LedgerQueryAdapter
from earnout_vault.walrus.client_base import BaseStorageClient
from earnout_vault.walrus.factory import StorageClientFactory
from earnout_vault.walrus.storage import BlobStorageAdapter


@dataclass
class Services:
    """Every component, constructed once by the entry point and passed by reference."""

    ledger: LedgerQueryAdapter
    storage: BlobStorageAdapter
    encryption: EncryptionAdapter
    verifier: AccessVerifier
    documents: DealDocumentService
    ledger_client: BaseLedgerClient
    storage_client: BaseStorageClient
    seal_client: BaseSealClient

    def close(self) -> None:
        """Close the network clients owned by the container."""
        for client in (self.ledger_client, self.storage_client, self.seal_client):
            client.close()

    def __enter__(self) -> "Services":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def load_backend_keypair(settings: Settings) -> Ed25519Keypair | None:
    """Decode the backend signing credential, or None when it is not configured.

    Raises:
        ConfigurationError: if a credential is set but cannot be decoded.
    """
    if not settings.sui_backend_private_key:
        return None
    try:
        return Ed25519Keypair.from_base64(settings.sui_backend_private_key)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid SUI_BACKEND_PRIVATE_KEY: {exc}") from exc


def build_services(settings: Settings) -> Services:
    """Build all adapters and the document workflow from settings."""
    keypair = load_backend_keypair(settings)

    ledger_client = SuiJsonRpcClient(
        rpc_url=settings.resolved_sui_rpc_url(),
        timeout_seconds=settings.request_timeout_seconds,
    )
    ledger = LedgerQueryAdapter(
        ledger_client,
        package_id=settings.earnout_package_id,
        audit_event_limit=settings.audit_event_limit,
    )

    storage_client = StorageClientFactory.create(settings)
    storage = BlobStorageAdapter(
        storage_client,
        keypair=keypair,
        storage_epochs=settings.walrus_storage_epochs,
        max_file_size=settings.walrus_max_file_size,
    )

    key_servers = load_key_server_configs(settings.seal_key_server_object_ids)
    seal_client = SealClientFactory.create(settings, key_servers)
    encryption = EncryptionAdapter(
        seal_client,
        key_servers=key_servers,
        keypair=keypair,
        ledger=ledger,
        enabled=settings.enable_server_encryption,
        policy_object_id=settings.seal_policy_object_id,
        threshold=settings.seal_threshold,
        session_ttl_minutes=settings.seal_session_ttl_minutes,
        approve_function=settings.seal_approve_function,
        require_approval_transaction=settings.seal_require_approval_transaction,
    )

    verifier = AccessVerifier(ledger, insecure_bypass=settings.access_insecure_bypass)
    documents = DealDocumentService(
        encryption=encryption,
        storage=storage,
        ledger=ledger,
        verifier=verifier,
    )

    Log.info(
        "Services initialized",
        network=settings.sui_network,
        storage=settings.storage_backend,
        seal=settings.seal_backend,
        signer=keypair.to_sui_address() if keypair else "<none>",
    )
    return Services(
        ledger=ledger,
        storage=storage,
        encryption=encryption,
        verifier=verifier,
        documents=documents,
        ledger_client=ledger_client,
        storage_client=storage_client,
        seal_client=seal_client,
    )
