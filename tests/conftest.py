from unittest.mock import MagicMock

import pytest

from earnout_vault.sui.client_base import BaseLedgerClient
from earnout_vault.sui.keys import Ed25519Keypair
from earnout_vault.walrus.example_client import InMemoryStorageClient
from factories import deal_fields, move_object


@pytest.fixture()
def keypair() -> Ed25519Keypair:
    """Deterministic backend credential (seed bytes 0..31)."""
    return Ed25519Keypair.from_secret_key(bytes(range(32)))


@pytest.fixture()
def memory_storage() -> InMemoryStorageClient:
    return InMemoryStorageClient(epoch=7)


@pytest.fixture()
def ledger_client() -> MagicMock:
    """Ledger client double that serves one active deal and no events."""
    client = MagicMock(spec=BaseLedgerClient)
    client.get_object.return_value = move_object(deal_fields())
    client.query_events.return_value = []
    return client
