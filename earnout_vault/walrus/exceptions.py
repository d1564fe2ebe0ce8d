from earnout_vault.errors import EarnoutVaultError


class StorageError(EarnoutVaultError):
    """Raised when the storage network rejects or fails a request."""
