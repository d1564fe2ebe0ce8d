import base64
from typing import Any

import httpx

from earnout_vault.logging.logger import Log
from earnout_vault.seal.client_base import BaseSealClient
from earnout_vault.seal.exceptions import EncryptionError
from earnout_vault.seal.models import KeyServerConfig
from earnout_vault.seal.session import SessionKey


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


class SealRelayClient(BaseSealClient):
    """Seal client that forwards requests to a trusted Seal relay over HTTP.

    The relay runs the reference Seal SDK next to this service and holds no
    state of its own: every call carries the key-server set and, for key
    fetches, the exported session key and approval transaction.
    """

    def __init__(
        self,
        *,
        relay_url: str,
        key_servers: list[KeyServerConfig],
        timeout_seconds: int,
        verify_key_servers: bool = False,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._relay_url = relay_url.rstrip("/")
        self._server_configs = [
            {"objectId": server.object_id, "weight": server.weight}
            for server in key_servers
        ]
        self._verify_key_servers = verify_key_servers
        self._client = httpx.Client(timeout=timeout_seconds, transport=transport)

    def encrypt(
        self,
        *,
        threshold: int,
        package_id: str,
        identity: str,
        data: bytes,
    ) -> bytes:
        body = self._post(
            "/v1/encrypt",
            {
                "threshold": threshold,
                "packageId": package_id,
                "id": identity,
                "data": _b64(data),
            },
        )
        return self._decode_field(body, "encryptedObject")

    def parse_identity(self, ciphertext: bytes) -> str:
        body = self._post("/v1/parse", {"data": _b64(ciphertext)})
        identity = body.get("id")
        if not isinstance(identity, str) or not identity:
            raise EncryptionError("Seal relay returned no identity")
        return identity

    def fetch_keys(
        self,
        *,
        ids: list[str],
        tx_bytes: bytes,
        session_key: SessionKey,
        threshold: int,
    ) -> None:
        self._post(
            "/v1/fetch_keys",
            {
                "ids": ids,
                "txBytes": _b64(tx_bytes),
                "sessionKey": session_key.export(),
                "threshold": threshold,
            },
        )

    def decrypt(
        self,
        *,
        data: bytes,
        session_key: SessionKey,
        tx_bytes: bytes,
        check_share_consistency: bool,
    ) -> bytes:
        body = self._post(
            "/v1/decrypt",
            {
                "data": _b64(data),
                "sessionKey": session_key.export(),
                "txBytes": _b64(tx_bytes),
                "checkShareConsistency": check_share_consistency,
            },
        )
        return self._decode_field(body, "plaintext")

    def close(self) -> None:
        self._client.close()

    def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        payload = {
            **payload,
            "serverConfigs": self._server_configs,
            "verifyKeyServers": self._verify_key_servers,
        }
        Log.debug("Seal relay request", path=path)
        try:
            response = self._client.post(f"{self._relay_url}{path}", json=payload)
        except httpx.HTTPError as exc:
            raise EncryptionError(f"Seal relay network error: {exc}") from exc
        if response.is_error:
            raise EncryptionError(
                f"Seal relay returned HTTP {response.status_code}: {response.text[:200]}"
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise EncryptionError(f"Seal relay returned invalid JSON: {exc}") from exc
        if not isinstance(body, dict):
            raise EncryptionError("Seal relay response must be a JSON object")
        return body

    @staticmethod
    def _decode_field(body: dict[str, Any], name: str) -> bytes:
        value = body.get(name)
        if not isinstance(value, str):
            raise EncryptionError(f"Seal relay response is missing '{name}'")
        try:
            return base64.b64decode(value, validate=True)
        except ValueError as exc:
            raise EncryptionError(f"Seal relay field '{name}' is not base64: {exc}") from exc
