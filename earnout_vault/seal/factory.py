from earnout_vault.config.settings import Settings
from earnout_vault.seal.client_base import BaseSealClient
from earnout_vault.seal.example_client import ExampleSealClient
from earnout_vault.seal.models import KeyServerConfig
from earnout_vault.seal.relay_client import SealRelayClient


class SealClientFactory:
    """Creates the configured Seal client."""

    BACKENDS = ("relay", "example")

    @classmethod
    def create(cls, settings: Settings, key_servers: list[KeyServerConfig]) -> BaseSealClient:
        backend = settings.seal_backend.lower()
        if backend == "example":
            return ExampleSealClient()
        if backend == "relay":
            return SealRelayClient(
                relay_url=settings.seal_relay_url,
                key_servers=key_servers,
                timeout_seconds=settings.request_timeout_seconds,
            )
        raise ValueError(
            f"Unknown Seal backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
