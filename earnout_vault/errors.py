class EarnoutVaultError(Exception):
    """Base exception for all earnout vault errors."""


class ConfigurationError(EarnoutVaultError):
    """Raised when a required setting is missing. Always raised before any network call."""


class ValidationError(EarnoutVaultError):
    """Raised when caller input is rejected (oversized payload, malformed identifier)."""
