from earnout_vault.access.models import AccessVerificationResult
from earnout_vault.logging.logger import Log
from earnout_vault.sui.ledger import LedgerQueryAdapter
from earnout_vault.sui.models import DealRole


class AccessVerifier:
    """Grants access iff the address is a ledger-recorded deal participant with the required role.

    ``insecure_bypass`` grants every request and exists for local testing
    only; it must be passed explicitly and is never inferred from the
    environment.
    """

    def __init__(self, ledger: LedgerQueryAdapter, *, insecure_bypass: bool = False) -> None:
        self._ledger = ledger
        self._insecure_bypass = insecure_bypass
        if insecure_bypass:
            Log.warning("Access verification insecure bypass is ENABLED; all access is granted")

    def verify_access(
        self,
        deal_id: str,
        user_address: str,
        required_role: DealRole | None = None,
    ) -> AccessVerificationResult:
        """Check *user_address* against the deal's recorded participants. Never raises."""
        Log.debug(
            "Verifying access",
            deal_id=deal_id,
            user=user_address,
            required_role=required_role.value if required_role else "any",
        )

        if self._insecure_bypass:
            Log.warning("Access granted by insecure bypass", deal_id=deal_id, user=user_address)
            return AccessVerificationResult(has_access=True, reason="insecure bypass enabled")

        if not self._ledger.is_configured:
            return AccessVerificationResult(
                has_access=False, reason="ledger package not configured"
            )

        try:
            role = self._ledger.get_participant_role(deal_id, user_address)
        except Exception as exc:
            Log.error(f"Access verification failed: {exc}", deal_id=deal_id)
            return AccessVerificationResult(has_access=False, reason=f"verification error: {exc}")

        if role is None:
            return AccessVerificationResult(
                has_access=False,
                reason=f"{user_address} is not a participant in deal {deal_id}",
            )
        if required_role is not None and role != required_role:
            return AccessVerificationResult(
                has_access=False,
                role=role,
                reason=f"user has role {role.value}, but {required_role.value} is required",
            )
        return AccessVerificationResult(has_access=True, role=role)
