"""Backend Ed25519 signing credential for the Sui ledger."""

import base64
import hashlib

import nacl.signing

from earnout_vault.sui.bcs import BcsWriter

ED25519_SCHEME_FLAG = 0x00
_PERSONAL_MESSAGE_INTENT = bytes([3, 0, 0])


class Ed25519Keypair:
    """Ed25519 keypair that derives a Sui address and signs personal messages."""

    def __init__(self, signing_key: nacl.signing.SigningKey) -> None:
        self._signing_key = signing_key

    @classmethod
    def generate(cls) -> "Ed25519Keypair":
        return cls(nacl.signing.SigningKey.generate())

    @classmethod
    def from_secret_key(cls, secret: bytes) -> "Ed25519Keypair":
        """Build a keypair from raw secret bytes.

        Accepts a 32-byte seed, a 33-byte seed prefixed with the Ed25519
        scheme flag, or a 64-byte seed+public-key secret.
        """
        if len(secret) == 33 and secret[0] == ED25519_SCHEME_FLAG:
            secret = secret[1:]
        elif len(secret) == 64:
            secret = secret[:32]
        if len(secret) != 32:
            raise ValueError(
                f"Ed25519 secret key must be 32 bytes, got {len(secret)}"
            )
        return cls(nacl.signing.SigningKey(secret))

    @classmethod
    def from_base64(cls, encoded: str) -> "Ed25519Keypair":
        try:
            secret = base64.b64decode(encoded.strip(), validate=True)
        except ValueError as exc:
            raise ValueError(f"Secret key is not valid base64: {exc}") from exc
        return cls.from_secret_key(secret)

    @property
    def public_key(self) -> bytes:
        return bytes(self._signing_key.verify_key)

    @property
    def secret_key(self) -> bytes:
        return bytes(self._signing_key)

    def to_sui_address(self) -> str:
        digest = hashlib.blake2b(
            bytes([ED25519_SCHEME_FLAG]) + self.public_key, digest_size=32
        )
        return "0x" + digest.hexdigest()

    def sign(self, data: bytes) -> bytes:
        return self._signing_key.sign(data).signature

    def sign_personal_message(self, message: bytes) -> str:
        """Sign *message* with the personal-message intent.

        Returns the serialized signature (scheme flag, signature, public key)
        as base64, the form the ledger and key servers verify.
        """
        intent_message = _PERSONAL_MESSAGE_INTENT + BcsWriter().vector_u8(message).to_bytes()
        digest = hashlib.blake2b(intent_message, digest_size=32).digest()
        signature = self.sign(digest)
        serialized = bytes([ED25519_SCHEME_FLAG]) + signature + self.public_key
        return base64.b64encode(serialized).decode("ascii")
