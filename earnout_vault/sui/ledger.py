"""Read-only queries against deal records on the Sui ledger."""

from earnout_vault.logging.logger import Log
from earnout_vault.sui.client_base import BaseLedgerClient
from earnout_vault.sui.exceptions import LedgerError
from earnout_vault.sui.bcs import normalize_address
from earnout_vault.sui.models import (
    AuditRecord,
    BlobReference,
    Deal,
    DealRole,
    participant_role,
)
from earnout_vault.sui.records import (
    move_object_fields,
    parse_audit_record,
    parse_blob_references,
    parse_deal,
)


class LedgerQueryAdapter:
    """Maps ledger objects and events into deal, blob and audit records.

    An empty ``package_id`` means the earnout package is not configured:
    list queries return empty results and participant checks are permissive.
    This differs from a configured package whose deal simply lacks a field.
    """

    AUDIT_RECORD_EVENT = "earnout::DataAuditRecordCreated"

    def __init__(
        self,
        client: BaseLedgerClient,
        *,
        package_id: str,
        audit_event_limit: int = 1000,
    ) -> None:
        self._client = client
        self._package_id = package_id
        self._audit_event_limit = audit_event_limit

    @property
    def is_configured(self) -> bool:
        return bool(self._package_id)

    # ------------------------------------------------------------------
    # Deal records
    # ------------------------------------------------------------------

    def get_deal(self, deal_id: str) -> Deal:
        """Fetch and parse a deal record.

        Raises:
            LedgerError: if the deal is missing, malformed or the query fails.
        """
        try:
            return parse_deal(deal_id, self._deal_fields(deal_id))
        except LedgerError:
            raise
        except Exception as exc:
            raise LedgerError(f"Failed to query deal {deal_id}: {exc}") from exc

    def get_deal_blob_ids(self, deal_id: str) -> list[str]:
        """Return blob ids registered on the deal, in upload order."""
        return [ref.blob_id for ref in self.get_deal_blob_references(deal_id)]

    def get_deal_blob_references(self, deal_id: str) -> list[BlobReference]:
        """Return normalized blob references registered on the deal.

        Empty when the package is not configured or when the deal has no
        ``walrus_blobs`` field.

        Raises:
            LedgerError: if the deal is missing or the query fails.
        """
        if not self.is_configured:
            Log.warning(
                "EARNOUT_PACKAGE_ID not configured, cannot query on-chain blobs",
                deal_id=deal_id,
            )
            return []

        try:
            references = parse_blob_references(self._deal_fields(deal_id))
        except Exception as exc:
            Log.error(f"Failed to query deal blob references: {exc}", deal_id=deal_id)
            raise LedgerError(f"Failed to query on-chain blob data: {exc}") from exc

        if references is None:
            Log.debug("No walrus_blobs field on deal, returning empty list", deal_id=deal_id)
            return []
        Log.debug(f"Found {len(references)} blob references", deal_id=deal_id)
        return references

    # ------------------------------------------------------------------
    # Audit records
    # ------------------------------------------------------------------

    def get_deal_audit_records(self, deal_id: str) -> list[AuditRecord]:
        """Collect audit records for a deal.

        Scans the most recent ``audit_event_limit`` creation events for
        record ids belonging to the deal, then fetches each record. A record
        that fails to fetch is logged and skipped.

        Raises:
            LedgerError: if the event query itself fails.
        """
        if not self.is_configured:
            Log.warning(
                "EARNOUT_PACKAGE_ID not configured, cannot query audit records",
                deal_id=deal_id,
            )
            return []

        try:
            events = self._client.query_events(
                f"{self._package_id}::{self.AUDIT_RECORD_EVENT}",
                limit=self._audit_event_limit,
            )
        except Exception as exc:
            Log.error(f"Failed to query audit record events: {exc}", deal_id=deal_id)
            raise LedgerError(f"Failed to query audit records: {exc}") from exc

        record_ids = self._audit_record_ids(events, deal_id)
        Log.debug(
            f"Scanned {len(events)} audit events, {len(record_ids)} match",
            deal_id=deal_id,
        )

        records: list[AuditRecord] = []
        for record_id in record_ids:
            try:
                response = self._client.get_object(record_id)
                if not response.get("data"):
                    continue
                fields = move_object_fields(response, record_id)
                records.append(parse_audit_record(record_id, fields))
            except Exception as exc:
                Log.warning(f"Skipping audit record: {exc}", record_id=record_id)
                continue

        Log.info(f"Retrieved {len(records)} audit records", deal_id=deal_id)
        return records

    def get_blob_audit_record(self, deal_id: str, blob_id: str) -> AuditRecord | None:
        """Return the audit record attesting *blob_id*, or None.

        Any failure is treated as "no record".
        """
        try:
            records = self.get_deal_audit_records(deal_id)
        except Exception as exc:
            Log.error(f"Failed to query blob audit record: {exc}", blob_id=blob_id)
            return None
        return next((record for record in records if record.data_id == blob_id), None)

    # ------------------------------------------------------------------
    # Participants
    # ------------------------------------------------------------------

    def verify_deal_participant(self, deal_id: str, address: str) -> bool:
        """Return whether *address* is the deal's buyer, seller or auditor.

        Open when the package is not configured; closed on any query error.
        """
        if not self.is_configured:
            Log.warning(
                "EARNOUT_PACKAGE_ID not configured, skipping participant verification",
                deal_id=deal_id,
            )
            return True

        try:
            role = self.get_participant_role(deal_id, address)
        except Exception as exc:
            Log.error(f"Failed to verify deal participant: {exc}", deal_id=deal_id)
            return False

        Log.debug(f"Participant verification result: {role is not None}", deal_id=deal_id)
        return role is not None

    def get_participant_role(self, deal_id: str, address: str) -> DealRole | None:
        """Return the role *address* holds in the deal, or None.

        Only the participant fields are read, so the rest of the record may
        carry values this package does not recognize.

        Raises:
            LedgerError: if the deal cannot be read.
        """
        try:
            fields = self._deal_fields(deal_id)
        except LedgerError:
            raise
        except Exception as exc:
            raise LedgerError(f"Failed to query deal {deal_id}: {exc}") from exc
        return participant_role(
            address,
            buyer=str(fields.get("buyer") or ""),
            seller=str(fields.get("seller") or ""),
            auditor=str(fields.get("auditor") or ""),
        )

    def get_shared_object_version(self, object_id: str) -> int:
        """Return the initial shared version of a shared object.

        Raises:
            LedgerError: if the object is missing or not shared.
        """
        response = self._client.get_object(object_id, show_content=False, show_owner=True)
        data = response.get("data")
        if not data:
            raise LedgerError(f"Object not found: {object_id}")
        owner = data.get("owner")
        if not isinstance(owner, dict) or "Shared" not in owner:
            raise LedgerError(f"Object {object_id} is not a shared object")
        return int(owner["Shared"]["initial_shared_version"])

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _deal_fields(self, deal_id: str) -> dict:
        response = self._client.get_object(deal_id)
        return move_object_fields(response, deal_id)

    @staticmethod
    def _audit_record_ids(events: list[dict], deal_id: str) -> list[str]:
        wanted = normalize_address(deal_id)
        record_ids: list[str] = []
        for event in events:
            parsed = event.get("parsedJson") or {}
            record_id = parsed.get("audit_record_id")
            event_deal_id = str(parsed.get("deal_id") or "")
            if record_id and event_deal_id and normalize_address(event_deal_id) == wanted:
                record_ids.append(record_id)
        return record_ids
