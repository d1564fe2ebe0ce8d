"""Tests for SealRelayClient over a mocked transport."""

import base64
import json

import httpx
import pytest

from earnout_vault.seal.exceptions import EncryptionError
from earnout_vault.seal.models import KeyServerConfig
from earnout_vault.seal.relay_client import SealRelayClient
from earnout_vault.seal.session import SessionKey
from earnout_vault.sui.keys import Ed25519Keypair
from factories import PACKAGE_ID


def _make_client(handler, captured: list[dict] | None = None) -> SealRelayClient:
    def recording(request: httpx.Request) -> httpx.Response:
        if captured is not None:
            captured.append({"path": request.url.path, "body": json.loads(request.content)})
        return handler(request)

    return SealRelayClient(
        relay_url="http://relay.test/",
        key_servers=[KeyServerConfig("0xk1"), KeyServerConfig("0xk2", weight=2)],
        timeout_seconds=5,
        transport=httpx.MockTransport(recording),
    )


class TestEncrypt:
    def test_posts_payload_with_server_configs(self) -> None:
        captured: list[dict] = []
        client = _make_client(
            lambda request: httpx.Response(
                200, json={"encryptedObject": base64.b64encode(b"sealed").decode()}
            ),
            captured,
        )
        result = client.encrypt(threshold=2, package_id=PACKAGE_ID, identity="dead", data=b"plain")
        assert result == b"sealed"
        request = captured[0]
        assert request["path"] == "/v1/encrypt"
        assert request["body"]["threshold"] == 2
        assert request["body"]["packageId"] == PACKAGE_ID
        assert request["body"]["id"] == "dead"
        assert base64.b64decode(request["body"]["data"]) == b"plain"
        assert request["body"]["serverConfigs"] == [
            {"objectId": "0xk1", "weight": 1},
            {"objectId": "0xk2", "weight": 2},
        ]
        assert request["body"]["verifyKeyServers"] is False

    def test_missing_field_raises(self) -> None:
        client = _make_client(lambda request: httpx.Response(200, json={}))
        with pytest.raises(EncryptionError, match="encryptedObject"):
            client.encrypt(threshold=2, package_id=PACKAGE_ID, identity="dead", data=b"plain")

    def test_http_error_raises(self) -> None:
        client = _make_client(lambda request: httpx.Response(502, text="key server timeout"))
        with pytest.raises(EncryptionError, match="HTTP 502"):
            client.encrypt(threshold=2, package_id=PACKAGE_ID, identity="dead", data=b"plain")


class TestKeyFlow:
    def test_parse_identity(self) -> None:
        client = _make_client(lambda request: httpx.Response(200, json={"id": "dead"}))
        assert client.parse_identity(b"sealed") == "dead"

    def test_parse_identity_without_id_raises(self) -> None:
        client = _make_client(lambda request: httpx.Response(200, json={"id": ""}))
        with pytest.raises(EncryptionError, match="no identity"):
            client.parse_identity(b"sealed")

    def test_fetch_keys_and_decrypt_send_session(self, keypair: Ed25519Keypair) -> None:
        captured: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/v1/decrypt":
                return httpx.Response(200, json={"plaintext": base64.b64encode(b"plain").decode()})
            return httpx.Response(200, json={})

        client = _make_client(handler, captured)
        session = SessionKey.create(keypair=keypair, package_id=PACKAGE_ID, ttl_min=10)
        client.fetch_keys(ids=["dead"], tx_bytes=b"\x00\x01", session_key=session, threshold=2)
        plaintext = client.decrypt(
            data=b"sealed", session_key=session, tx_bytes=b"\x00\x01", check_share_consistency=True
        )
        assert plaintext == b"plain"
        fetch, decrypt = captured
        assert fetch["path"] == "/v1/fetch_keys"
        assert fetch["body"]["ids"] == ["dead"]
        assert base64.b64decode(fetch["body"]["txBytes"]) == b"\x00\x01"
        assert fetch["body"]["sessionKey"]["address"] == keypair.to_sui_address()
        assert decrypt["body"]["checkShareConsistency"] is True
