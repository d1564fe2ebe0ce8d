from dataclasses import dataclass


@dataclass(frozen=True)
class KeyServerConfig:
    object_id: str
    weight: int = 1


@dataclass(frozen=True)
class EncryptionConfig:
    """Per-upload encryption parameters.

    ``policy_object_id`` falls back to the adapter's configured policy when empty.
    """

    deal_id: str
    policy_object_id: str = ""
    period_id: str = ""


@dataclass(frozen=True)
class EncryptionResult:
    ciphertext: bytes
    commitment: str  # sha256:<hex>
    policy_object_id: str
    encrypted_at: str


@dataclass(frozen=True)
class DecryptionResult:
    plaintext: bytes
    policy_object_id: str
    decrypted_at: str


def load_key_server_configs(raw_ids: str) -> list[KeyServerConfig]:
    """Parse a comma-separated key-server id list; blanks are dropped, weights are equal."""
    return [
        KeyServerConfig(object_id=object_id.strip())
        for object_id in raw_ids.split(",")
        if object_id.strip()
    ]
