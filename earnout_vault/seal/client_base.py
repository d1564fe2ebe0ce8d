from abc import ABC, abstractmethod

from earnout_vault.seal.session import SessionKey


class BaseSealClient(ABC):
    """Contract for threshold-encryption clients backed by key servers."""

    @abstractmethod
    def encrypt(
        self,
        *,
        threshold: int,
        package_id: str,
        identity: str,
        data: bytes,
    ) -> bytes:
        """Encrypt *data* under *identity* and return the encrypted object bytes."""

    @abstractmethod
    def parse_identity(self, ciphertext: bytes) -> str:
        """Return the hex identity embedded in an encrypted object."""

    @abstractmethod
    def fetch_keys(
        self,
        *,
        ids: list[str],
        tx_bytes: bytes,
        session_key: SessionKey,
        threshold: int,
    ) -> None:
        """Fetch at least *threshold* key shares for *ids* from the key servers."""

    @abstractmethod
    def decrypt(
        self,
        *,
        data: bytes,
        session_key: SessionKey,
        tx_bytes: bytes,
        check_share_consistency: bool,
    ) -> bytes:
        """Reconstruct the plaintext from previously fetched key shares."""

    def close(self) -> None:
        """Release network resources held by the client."""
