import itertools
from typing import Any

import httpx

from earnout_vault.logging.logger import Log
from earnout_vault.sui.client_base import BaseLedgerClient
from earnout_vault.sui.exceptions import LedgerError


class SuiJsonRpcClient(BaseLedgerClient):
    """Ledger client speaking Sui JSON-RPC 2.0 over httpx."""

    def __init__(
        self,
        *,
        rpc_url: str,
        timeout_seconds: int,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._rpc_url = rpc_url
        self._client = httpx.Client(timeout=timeout_seconds, transport=transport)
        self._request_ids = itertools.count(1)

    def get_object(
        self,
        object_id: str,
        *,
        show_content: bool = True,
        show_owner: bool = False,
    ) -> dict[str, Any]:
        options = {
            "showContent": show_content,
            "showOwner": show_owner,
            "showType": True,
        }
        result = self._call("sui_getObject", [object_id, options])
        return result if isinstance(result, dict) else {}

    def query_events(self, event_type: str, *, limit: int) -> list[dict[str, Any]]:
        """Collect up to *limit* events, following page cursors.

        Fullnodes cap the page size below the requested limit, so pages are
        fetched until *limit* events are collected or no page remains.
        """
        events: list[dict[str, Any]] = []
        cursor: Any = None
        while len(events) < limit:
            # params: query, cursor, limit, descending_order
            result = self._call(
                "suix_queryEvents",
                [{"MoveEventType": event_type}, cursor, limit - len(events), True],
            )
            if not isinstance(result, dict):
                break
            page = list(result.get("data") or [])
            events.extend(page)
            cursor = result.get("nextCursor")
            if not page or not result.get("hasNextPage") or cursor is None:
                break
        Log.debug("Sui events collected", event_type=event_type, count=len(events))
        return events[:limit]

    def close(self) -> None:
        self._client.close()

    def _call(self, method: str, params: list[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": method,
            "params": params,
        }
        Log.debug("Sui RPC request", method=method)
        try:
            response = self._client.post(self._rpc_url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as exc:
            raise LedgerError(f"Sui RPC network error: {exc}") from exc
        except ValueError as exc:
            raise LedgerError(f"Sui RPC returned invalid JSON: {exc}") from exc

        error = body.get("error") if isinstance(body, dict) else None
        if error:
            message = error.get("message", error) if isinstance(error, dict) else error
            raise LedgerError(f"Sui RPC error in {method}: {message}")
        return body.get("result") if isinstance(body, dict) else None
