from earnout_vault.config.settings import Settings
from earnout_vault.walrus.client_base import BaseStorageClient
from earnout_vault.walrus.example_client import InMemoryStorageClient
from earnout_vault.walrus.http_client import WalrusHttpClient


class StorageClientFactory:
    """Creates the configured storage client."""

    BACKENDS = ("walrus", "memory")

    @classmethod
    def create(cls, settings: Settings) -> BaseStorageClient:
        backend = settings.storage_backend.lower()
        if backend == "memory":
            return InMemoryStorageClient(
                storage_price_per_unit=settings.walrus_storage_price_per_unit,
                write_price_per_unit=settings.walrus_write_price_per_unit,
            )
        if backend == "walrus":
            return WalrusHttpClient(
                publisher_url=settings.walrus_publisher_url,
                aggregator_url=settings.walrus_aggregator_url,
                storage_node_url=settings.walrus_storage_node_url,
                timeout_seconds=settings.request_timeout_seconds,
                storage_price_per_unit=settings.walrus_storage_price_per_unit,
                write_price_per_unit=settings.walrus_write_price_per_unit,
            )
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
