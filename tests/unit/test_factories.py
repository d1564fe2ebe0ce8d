import pytest

from earnout_vault.config.settings import Settings
from earnout_vault.seal.example_client import ExampleSealClient
from earnout_vault.seal.factory import SealClientFactory
from earnout_vault.seal.models import KeyServerConfig, load_key_server_configs
from earnout_vault.seal.relay_client import SealRelayClient
from earnout_vault.walrus.example_client import InMemoryStorageClient
from earnout_vault.walrus.factory import StorageClientFactory
from earnout_vault.walrus.http_client import WalrusHttpClient


class TestStorageClientFactory:
    def test_creates_walrus_client(self) -> None:
        client = StorageClientFactory.create(Settings(storage_backend="walrus"))
        assert isinstance(client, WalrusHttpClient)
        client.close()

    def test_creates_memory_client(self) -> None:
        client = StorageClientFactory.create(Settings(storage_backend="Memory"))
        assert isinstance(client, InMemoryStorageClient)

    def test_unknown_backend_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown storage backend"):
            StorageClientFactory.create(Settings(storage_backend="s3"))


class TestSealClientFactory:
    def test_creates_relay_client(self) -> None:
        client = SealClientFactory.create(Settings(seal_backend="relay"), [KeyServerConfig("0xk1")])
        assert isinstance(client, SealRelayClient)
        client.close()

    def test_creates_example_client(self) -> None:
        client = SealClientFactory.create(Settings(seal_backend="example"), [])
        assert isinstance(client, ExampleSealClient)

    def test_unknown_backend_raises(self) -> None:
        with pytest.raises(ValueError, match="Choose from"):
            SealClientFactory.create(Settings(seal_backend="kms"), [])


class TestLoadKeyServerConfigs:
    def test_splits_and_strips(self) -> None:
        configs = load_key_server_configs(" 0xk1, ,0xk2 ")
        assert configs == [KeyServerConfig("0xk1"), KeyServerConfig("0xk2")]

    def test_empty_string_gives_no_servers(self) -> None:
        assert load_key_server_configs("") == []
