from dataclasses import dataclass

from earnout_vault.sui.models import DealRole


@dataclass(frozen=True)
class AccessVerificationResult:
    """Authorization outcome as a value; denials carry a reason instead of raising."""

    has_access: bool
    role: DealRole | None = None
    reason: str | None = None
