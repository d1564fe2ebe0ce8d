from earnout_vault.errors import EarnoutVaultError


class LedgerError(EarnoutVaultError):
    """Raised when a ledger query fails or returns an unexpected shape."""
