from earnout_vault.errors import EarnoutVaultError


class EncryptionError(EarnoutVaultError):
    """Raised when threshold encryption or decryption fails."""
