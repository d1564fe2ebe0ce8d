"""Normalization of ledger object fields into domain records.

Deal records were written under two field-naming conventions over time
(snake_case from the Move structs, camelCase from an earlier indexer).
``normalize_blob_reference`` is the single compatibility shim for both:
snake_case keys take priority, camelCase keys are the fallback.
"""

from datetime import datetime, timezone
from typing import Any

from earnout_vault.sui.exceptions import LedgerError
from earnout_vault.sui.models import AuditRecord, BlobReference, Deal, DealStatus

_EPOCH_START = datetime.fromtimestamp(0, tz=timezone.utc).isoformat()

_STATUS_BY_CODE = {
    0: DealStatus.DRAFT,
    1: DealStatus.ACTIVE,
    2: DealStatus.COMPLETED,
    3: DealStatus.CANCELLED,
}


def move_object_fields(response: dict[str, Any], object_id: str) -> dict[str, Any]:
    """Extract the field map from a ``sui_getObject`` response.

    Raises:
        LedgerError: if the object does not exist or is not a Move object.
    """
    data = response.get("data")
    if not data:
        raise LedgerError(f"Object not found: {object_id}")
    content = data.get("content")
    if not content or content.get("dataType") != "moveObject":
        raise LedgerError(f"Invalid object structure: {object_id}")
    fields = content.get("fields")
    return fields if isinstance(fields, dict) else {}


def _unwrap_struct(raw: Any) -> dict[str, Any]:
    # Nested structs arrive either bare or as {"type": ..., "fields": {...}}.
    if isinstance(raw, dict) and isinstance(raw.get("fields"), dict):
        return raw["fields"]
    return raw if isinstance(raw, dict) else {}


def _first(fields: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = fields.get(key)
        if value not in (None, ""):
            return value
    return None


def _as_int(value: Any, default: int = 0) -> int:
    if value is None or value == "":
        return default
    return int(value)


def _option(value: Any) -> Any:
    """Unwrap a Move ``Option``: ``{"vec": [x]}`` or a bare value/None."""
    if isinstance(value, dict) and "vec" in value:
        vec = value["vec"] or []
        return vec[0] if vec else None
    return value


def _iso_from_ms(milliseconds: int) -> str:
    return datetime.fromtimestamp(milliseconds / 1000, tz=timezone.utc).isoformat()


def normalize_blob_reference(raw: Any) -> BlobReference:
    """Normalize one ``walrus_blobs`` entry into a BlobReference.

    Priority per field: snake_case, then camelCase. ``uploaded_at`` is in
    seconds and wins over ``uploadedAt`` in milliseconds. Missing
    timestamps render as the Unix epoch start.
    """
    fields = _unwrap_struct(raw)
    uploaded_at_seconds = fields.get("uploaded_at")
    uploaded_at_ms = fields.get("uploadedAt")
    if uploaded_at_seconds not in (None, "", 0, "0"):
        uploaded_at = _iso_from_ms(_as_int(uploaded_at_seconds) * 1000)
    elif uploaded_at_ms not in (None, "", 0, "0"):
        uploaded_at = _iso_from_ms(_as_int(uploaded_at_ms))
    else:
        uploaded_at = _EPOCH_START

    return BlobReference(
        blob_id=str(_first(fields, "blob_id", "blobId") or ""),
        period_id=str(_first(fields, "period_id", "periodId") or ""),
        data_type=str(_first(fields, "data_type", "dataType") or ""),
        size=_as_int(fields.get("size")),
        uploaded_at=uploaded_at,
        uploader_address=str(_first(fields, "uploader", "uploaderAddress") or ""),
    )


def parse_blob_references(fields: dict[str, Any]) -> list[BlobReference] | None:
    """Return the deal's blob references, or None when the field is absent."""
    raw_blobs = fields.get("walrus_blobs")
    if not isinstance(raw_blobs, list):
        return None
    references = [normalize_blob_reference(entry) for entry in raw_blobs]
    return [ref for ref in references if ref.blob_id]


def parse_audit_record(record_id: str, fields: dict[str, Any]) -> AuditRecord:
    auditor = _option(fields.get("auditor"))
    audit_timestamp = _option(fields.get("audit_timestamp"))
    return AuditRecord(
        id=record_id,
        data_id=str(fields.get("data_id") or ""),
        deal_id=str(fields.get("deal_id") or ""),
        period_id=str(fields.get("period_id") or ""),
        uploader=str(fields.get("uploader") or ""),
        upload_timestamp=_as_int(fields.get("upload_timestamp")),
        audited=bool(fields.get("audited", False)),
        auditor=str(auditor) if auditor else None,
        audit_timestamp=_as_int(audit_timestamp) if audit_timestamp else None,
    )


def parse_deal(deal_id: str, fields: dict[str, Any]) -> Deal:
    raw_status = _first(fields, "status")
    if isinstance(raw_status, str) and not raw_status.isdigit():
        try:
            status = DealStatus(raw_status.lower())
        except ValueError as exc:
            raise LedgerError(f"Unknown deal status {raw_status!r} for deal {deal_id}") from exc
    else:
        code = _as_int(raw_status)
        if code not in _STATUS_BY_CODE:
            raise LedgerError(f"Unknown deal status code {code} for deal {deal_id}")
        status = _STATUS_BY_CODE[code]

    return Deal(
        deal_id=deal_id,
        name=str(_first(fields, "name") or ""),
        buyer=str(_first(fields, "buyer") or ""),
        seller=str(_first(fields, "seller") or ""),
        auditor=str(_first(fields, "auditor") or ""),
        currency=str(_first(fields, "currency") or ""),
        status=status,
        kpi_target=_as_int(_first(fields, "kpi_target", "kpiTarget")),
        contingent_consideration=_as_int(
            _first(fields, "contingent_consideration", "contingentConsideration")
        ),
        overhead_allocation_percentage=_as_int(
            _first(
                fields,
                "overhead_allocation_percentage",
                "overheadAllocationPercentage",
            )
        ),
        blobs=parse_blob_references(fields) or [],
    )
