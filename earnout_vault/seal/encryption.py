"""Threshold encryption adapter binding ciphertext to a deal identity."""

import hashlib
import re
from datetime import datetime, timezone

from earnout_vault.errors import ConfigurationError
from earnout_vault.logging.logger import Log
from earnout_vault.seal.approval import build_approval_transaction
from earnout_vault.seal.client_base import BaseSealClient
from earnout_vault.seal.exceptions import EncryptionError
from earnout_vault.seal.models import (
    DecryptionResult,
    EncryptionConfig,
    EncryptionResult,
    KeyServerConfig,
)
from earnout_vault.seal.session import SessionKey
from earnout_vault.sui.bcs import normalize_address
from earnout_vault.sui.keys import Ed25519Keypair
from earnout_vault.sui.ledger import LedgerQueryAdapter

_OBJECT_ID_RE = re.compile(r"^0x[0-9a-f]{1,64}$")


def generate_commitment(data: bytes) -> str:
    """SHA-256 commitment over *data*: ``sha256:<64 hex chars>``."""
    return f"sha256:{hashlib.sha256(data).hexdigest()}"


def identity_for_deal(deal_id: str) -> str:
    """Hex identity used to bind ciphertext to a deal.

    ``0x`` object ids are normalized to their 32-byte form (without ``0x``)
    so short and padded spellings share one identity; any other deal id is
    hex-encoded from its UTF-8 bytes.
    """
    candidate = deal_id.strip().lower()
    if _OBJECT_ID_RE.match(candidate):
        return normalize_address(candidate)[2:]
    return deal_id.encode("utf-8").hex()


def split_policy_id(policy_object_id: str) -> tuple[str, str]:
    """Split ``<package>::<module>`` into its parts; module is empty when absent."""
    package_id, _, module = policy_object_id.partition("::")
    return package_id, module.split("::")[0]


class EncryptionAdapter:
    """Encrypts under the on-ledger access policy and decrypts via session-scoped key shares.

    The client, key-server set and signing credential are fixed at
    construction.
    """

    def __init__(
        self,
        client: BaseSealClient,
        *,
        key_servers: list[KeyServerConfig],
        keypair: Ed25519Keypair | None,
        ledger: LedgerQueryAdapter | None,
        enabled: bool,
        policy_object_id: str,
        threshold: int = 2,
        session_ttl_minutes: int = 10,
        approve_function: str = "seal_approve",
        require_approval_transaction: bool = True,
    ) -> None:
        self._client = client
        self._key_servers = tuple(key_servers)
        self._keypair = keypair
        self._ledger = ledger
        self._enabled = enabled
        self._policy_object_id = policy_object_id
        self._threshold = threshold
        self._session_ttl_minutes = session_ttl_minutes
        self._approve_function = approve_function
        self._require_approval_transaction = require_approval_transaction

        if not self._key_servers:
            Log.warning(
                "No Seal key server object ids configured; "
                "set SEAL_KEY_SERVER_OBJECT_IDS (comma-separated)"
            )
        Log.debug(
            "Encryption adapter initialized",
            key_servers=len(self._key_servers),
            policy=policy_object_id or "<unset>",
        )

    @property
    def key_servers(self) -> tuple[KeyServerConfig, ...]:
        return self._key_servers

    @property
    def policy_object_id(self) -> str:
        return self._policy_object_id

    def encrypt(self, plaintext: bytes, config: EncryptionConfig) -> EncryptionResult:
        """Encrypt *plaintext* with the deal id as identity.

        Raises:
            ConfigurationError: if encryption is disabled or no policy is configured.
            EncryptionError: if the client call fails.
        """
        if not self._enabled:
            raise ConfigurationError("Server-side encryption is disabled")
        if not self._policy_object_id:
            raise ConfigurationError("Seal policy object ID is not configured")

        policy_object_id = config.policy_object_id or self._policy_object_id
        package_id, _ = split_policy_id(policy_object_id)
        Log.debug(
            "Encrypting data with Seal",
            deal_id=config.deal_id,
            policy=policy_object_id,
            size=len(plaintext),
        )
        try:
            ciphertext = self._client.encrypt(
                threshold=self._threshold,
                package_id=package_id,
                identity=identity_for_deal(config.deal_id),
                data=plaintext,
            )
        except Exception as exc:
            Log.error(f"Seal encryption failed: {exc}", deal_id=config.deal_id)
            raise EncryptionError(f"Failed to encrypt data: {exc}") from exc

        result = EncryptionResult(
            ciphertext=ciphertext,
            commitment=generate_commitment(ciphertext),
            policy_object_id=policy_object_id,
            encrypted_at=datetime.now(timezone.utc).isoformat(),
        )
        Log.info(
            "Encryption successful",
            deal_id=config.deal_id,
            size=len(ciphertext),
            commitment=result.commitment,
        )
        return result

    def decrypt(self, ciphertext: bytes, deal_id: str, user_address: str) -> DecryptionResult:
        """Recover plaintext for a deal's ciphertext.

        Callers must verify *user_address* may access the deal first; the
        approval transaction proves the backend's own authorization.

        Raises:
            ConfigurationError: if decryption is disabled or credentials are missing.
            EncryptionError: if the identity does not match or a client call fails.
        """
        if not self._enabled:
            raise ConfigurationError("Server-side decryption is disabled")
        if self._keypair is None:
            raise ConfigurationError("Backend keypair is not configured for decryption")
        if not self._policy_object_id:
            raise ConfigurationError("Seal policy object ID is not configured")
        if self._require_approval_transaction and self._ledger is None:
            raise ConfigurationError(
                "A ledger adapter is required to build the approval transaction"
            )

        package_id, module = split_policy_id(self._policy_object_id)
        Log.debug(
            "Decrypting data with Seal",
            deal_id=deal_id,
            user=user_address,
            size=len(ciphertext),
        )
        try:
            identity = self._client.parse_identity(ciphertext)
            if identity.lower().removeprefix("0x") != identity_for_deal(deal_id):
                raise EncryptionError(f"Ciphertext is not bound to deal {deal_id}")
            session_key = SessionKey.create(
                keypair=self._keypair,
                package_id=package_id,
                ttl_min=self._session_ttl_minutes,
            )
            tx_bytes = self._approval_transaction(package_id, module, identity, deal_id)
            self._client.fetch_keys(
                ids=[identity],
                tx_bytes=tx_bytes,
                session_key=session_key,
                threshold=self._threshold,
            )
            plaintext = self._client.decrypt(
                data=ciphertext,
                session_key=session_key,
                tx_bytes=tx_bytes,
                check_share_consistency=True,
            )
        except Exception as exc:
            Log.error(f"Seal decryption failed: {exc}", deal_id=deal_id)
            raise EncryptionError(f"Failed to decrypt data: {exc}") from exc

        Log.info("Decryption successful", deal_id=deal_id, size=len(plaintext))
        return DecryptionResult(
            plaintext=plaintext,
            policy_object_id=self._policy_object_id,
            decrypted_at=datetime.now(timezone.utc).isoformat(),
        )

    def _approval_transaction(
        self, package_id: str, module: str, identity: str, deal_id: str
    ) -> bytes:
        if not self._require_approval_transaction:
            Log.warning(
                "Submitting empty approval transaction; decryption is unauthenticated",
                deal_id=deal_id,
            )
            return b""
        if self._ledger is None:
            raise ConfigurationError("No ledger adapter to build the approval transaction")
        if not module:
            raise EncryptionError(
                f"Policy id {self._policy_object_id!r} has no module to approve against"
            )
        version = self._ledger.get_shared_object_version(deal_id)
        return build_approval_transaction(
            package_id=package_id,
            module=module,
            function=self._approve_function,
            identity=identity.lower().removeprefix("0x"),
            deal_id=deal_id,
            deal_initial_shared_version=version,
        )
