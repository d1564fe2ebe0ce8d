from abc import ABC, abstractmethod
from typing import Any


class BaseLedgerClient(ABC):
    """Contract for read-only ledger RPC clients."""

    @abstractmethod
    def get_object(
        self,
        object_id: str,
        *,
        show_content: bool = True,
        show_owner: bool = False,
    ) -> dict[str, Any]:
        """Return the raw object response: ``{"data": {...}}`` or ``{"error": {...}}``.

        Raises:
            LedgerError: on transport or RPC failure.
        """

    @abstractmethod
    def query_events(self, event_type: str, *, limit: int) -> list[dict[str, Any]]:
        """Return up to *limit* events of *event_type*, most recent first.

        Raises:
            LedgerError: on transport or RPC failure.
        """

    def close(self) -> None:
        """Release network resources held by the client."""
