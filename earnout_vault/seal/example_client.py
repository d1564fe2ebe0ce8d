"""Example Seal client.

No network calls and no threshold cryptography: a single locally derived
key per (package, identity) protects the payload. Useful for local
development and tests, and as a template for other Seal clients. Never use
it to protect real documents.
"""

import hashlib
from typing import ClassVar

import nacl.exceptions
import nacl.secret

from earnout_vault.seal.client_base import BaseSealClient
from earnout_vault.seal.exceptions import EncryptionError
from earnout_vault.seal.session import SessionKey


class ExampleSealClient(BaseSealClient):
    """Encrypted object layout: magic, package id, identity, sealed box."""

    MAGIC: ClassVar[bytes] = b"EXS1"

    def __init__(self, master_key: bytes = b"earnout-vault-example") -> None:
        self._master_key = master_key
        self._fetched: set[tuple[bytes, str]] = set()

    def encrypt(
        self,
        *,
        threshold: int,
        package_id: str,
        identity: str,
        data: bytes,
    ) -> bytes:
        if threshold < 1:
            raise EncryptionError(f"Threshold must be at least 1, got {threshold}")
        box = nacl.secret.SecretBox(self._derive_key(package_id, identity))
        header = (
            self.MAGIC
            + self._length_prefixed(package_id.encode("utf-8"))
            + self._length_prefixed(identity.encode("utf-8"))
        )
        return header + bytes(box.encrypt(data))

    def parse_identity(self, ciphertext: bytes) -> str:
        _, identity, _ = self._parse(ciphertext)
        return identity

    def fetch_keys(
        self,
        *,
        ids: list[str],
        tx_bytes: bytes,
        session_key: SessionKey,
        threshold: int,
    ) -> None:
        _ = tx_bytes, threshold
        if session_key.is_expired():
            raise EncryptionError("Session key has expired")
        for identity in ids:
            self._fetched.add((session_key.session_keypair.public_key, identity))

    def decrypt(
        self,
        *,
        data: bytes,
        session_key: SessionKey,
        tx_bytes: bytes,
        check_share_consistency: bool,
    ) -> bytes:
        _ = tx_bytes, check_share_consistency
        package_id, identity, sealed = self._parse(data)
        grant = (session_key.session_keypair.public_key, identity)
        if grant not in self._fetched:
            raise EncryptionError(f"No keys fetched for identity {identity}")
        # Fetched keys are single use.
        self._fetched.discard(grant)
        box = nacl.secret.SecretBox(self._derive_key(package_id, identity))
        try:
            return box.decrypt(sealed)
        except nacl.exceptions.CryptoError as exc:
            raise EncryptionError(f"Ciphertext failed authentication: {exc}") from exc

    def _derive_key(self, package_id: str, identity: str) -> bytes:
        return hashlib.blake2b(
            f"{package_id}:{identity}".encode("utf-8"),
            key=self._master_key[:64],
            digest_size=nacl.secret.SecretBox.KEY_SIZE,
        ).digest()

    @staticmethod
    def _length_prefixed(value: bytes) -> bytes:
        return len(value).to_bytes(2, "big") + value

    def _parse(self, data: bytes) -> tuple[str, str, bytes]:
        if not data.startswith(self.MAGIC):
            raise EncryptionError("Not an example-encrypted object")
        offset = len(self.MAGIC)
        fields: list[str] = []
        for _ in range(2):
            if len(data) < offset + 2:
                raise EncryptionError("Truncated encrypted object header")
            length = int.from_bytes(data[offset:offset + 2], "big")
            offset += 2
            fields.append(data[offset:offset + length].decode("utf-8"))
            offset += length
        return fields[0], fields[1], data[offset:]
