"""Short-lived session keys authorizing key-share requests."""

import base64
import time
from dataclasses import dataclass
from datetime import datetime, timezone

from earnout_vault.sui.keys import Ed25519Keypair


@dataclass(frozen=True)
class SessionKey:
    """Ephemeral key certified by the backend credential for *ttl_min* minutes.

    The backend signs a personal message naming the package, lifetime and
    the session public key; key servers accept requests signed by the
    session key while the certificate is valid.
    """

    address: str
    package_id: str
    creation_time_ms: int
    ttl_min: int
    session_keypair: Ed25519Keypair
    personal_message: bytes
    signature: str

    @classmethod
    def create(
        cls,
        *,
        keypair: Ed25519Keypair,
        package_id: str,
        ttl_min: int,
        now_ms: int | None = None,
    ) -> "SessionKey":
        if ttl_min <= 0:
            raise ValueError(f"Session TTL must be positive, got {ttl_min}")
        creation_time_ms = int(time.time() * 1000) if now_ms is None else now_ms
        session_keypair = Ed25519Keypair.generate()
        message = personal_message(
            package_id, ttl_min, creation_time_ms, session_keypair.public_key
        )
        return cls(
            address=keypair.to_sui_address(),
            package_id=package_id,
            creation_time_ms=creation_time_ms,
            ttl_min=ttl_min,
            session_keypair=session_keypair,
            personal_message=message,
            signature=keypair.sign_personal_message(message),
        )

    @property
    def expires_at_ms(self) -> int:
        return self.creation_time_ms + self.ttl_min * 60_000

    def is_expired(self, now_ms: int | None = None) -> bool:
        now_ms = int(time.time() * 1000) if now_ms is None else now_ms
        return now_ms >= self.expires_at_ms

    def export(self) -> dict[str, object]:
        """Serializable form handed to a trusted relay."""
        return {
            "address": self.address,
            "packageId": self.package_id,
            "creationTimeMs": self.creation_time_ms,
            "ttlMin": self.ttl_min,
            "sessionKey": base64.b64encode(self.session_keypair.secret_key).decode("ascii"),
            "personalMessageSignature": self.signature,
        }


def personal_message(
    package_id: str, ttl_min: int, creation_time_ms: int, session_public_key: bytes
) -> bytes:
    created = datetime.fromtimestamp(creation_time_ms / 1000, tz=timezone.utc)
    stamp = created.strftime("%Y-%m-%d %H:%M:%S")
    encoded_key = base64.b64encode(session_public_key).decode("ascii")
    return (
        f"Accessing keys of package {package_id} for {ttl_min} mins from "
        f"{stamp} UTC, session key {encoded_key}"
    ).encode("utf-8")
