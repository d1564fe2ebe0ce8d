"""Tests for service wiring and the command-line entry point."""

import base64
import json
from pathlib import Path

import pytest

from earnout_vault.config.settings import Settings
from earnout_vault.errors import ConfigurationError
from earnout_vault.logging.logger import Log
from earnout_vault.main import main
from earnout_vault.seal.example_client import ExampleSealClient
from earnout_vault.services import build_services, load_backend_keypair
from earnout_vault.sui.keys import Ed25519Keypair
from earnout_vault.walrus.example_client import InMemoryStorageClient
from factories import DEAL_ID, POLICY_ID

SECRET = base64.b64encode(bytes(range(32))).decode()


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(Log, "configure", lambda log_level: None)


@pytest.fixture()
def local_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Offline backends with a configured signer and policy."""
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    monkeypatch.setenv("SEAL_BACKEND", "example")
    monkeypatch.setenv("SUI_BACKEND_PRIVATE_KEY", SECRET)
    monkeypatch.setenv("SEAL_POLICY_OBJECT_ID", POLICY_ID)
    monkeypatch.setenv("SEAL_KEY_SERVER_OBJECT_IDS", "0xk1,0xk2")


class TestLoadBackendKeypair:
    def test_unset_key_gives_none(self) -> None:
        assert load_backend_keypair(Settings(sui_backend_private_key="")) is None

    def test_decodes_base64_secret(self, keypair: Ed25519Keypair) -> None:
        loaded = load_backend_keypair(Settings(sui_backend_private_key=SECRET))
        assert loaded is not None
        assert loaded.to_sui_address() == keypair.to_sui_address()

    def test_invalid_key_raises_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError, match="SUI_BACKEND_PRIVATE_KEY"):
            load_backend_keypair(Settings(sui_backend_private_key="AAAA"))


class TestBuildServices:
    def test_wires_configured_backends(self, local_env: None) -> None:
        with build_services(Settings()) as services:
            assert isinstance(services.storage_client, InMemoryStorageClient)
            assert isinstance(services.seal_client, ExampleSealClient)
            assert services.encryption.policy_object_id == POLICY_ID
            assert len(services.encryption.key_servers) == 2
            assert services.ledger.is_configured is False


class TestMain:
    def test_cost_prints_quote(self, local_env: None, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["cost", "1048576", "--epochs", "2"]) == 0
        quote = json.loads(capsys.readouterr().out)
        assert quote["storage_cost"] == 200_000
        assert quote["write_cost"] == 20_000
        assert quote["total_cost"] == 220_000

    def test_upload_prints_commitments(
        self, local_env: None, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        document = tmp_path / "journal.csv"
        document.write_bytes(b"account,amount\nrevenue,100\n")
        exit_code = main(
            ["upload", str(document), "--deal", DEAL_ID, "--period", "2025-Q1", "--data-type", "journal"]
        )
        assert exit_code == 0
        stored = json.loads(capsys.readouterr().out)
        assert stored["encryption_commitment"].startswith("sha256:")
        assert stored["upload"]["commitment"].startswith("walrus:")
        assert stored["upload"]["end_epoch"] == stored["upload"]["start_epoch"] + 5

    def test_verify_without_package_denies(
        self, local_env: None, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert main(["verify", DEAL_ID, "0x1"]) == 0
        decision = json.loads(capsys.readouterr().out)
        assert decision["has_access"] is False

    def test_domain_error_returns_exit_code_one(
        self, local_env: None, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert main(["info", "bad/blob"]) == 1
        assert "Malformed blob id" in capsys.readouterr().err

    def test_disabled_encryption_fails_upload(
        self,
        local_env: None,
        monkeypatch: pytest.MonkeyPatch,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.setenv("ENABLE_SERVER_ENCRYPTION", "false")
        document = tmp_path / "journal.csv"
        document.write_bytes(b"data")
        exit_code = main(
            ["upload", str(document), "--deal", DEAL_ID, "--period", "2025-Q1", "--data-type", "journal"]
        )
        assert exit_code == 1
        assert "disabled" in capsys.readouterr().err
