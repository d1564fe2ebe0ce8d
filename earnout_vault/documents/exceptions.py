from earnout_vault.errors import EarnoutVaultError


class AccessDeniedError(EarnoutVaultError):
    """Raised by the document workflow when access verification denies a download."""
