import os
from collections.abc import Generator

import pytest

from earnout_vault.config.settings import Settings
from earnout_vault.sui.exceptions import LedgerError
from earnout_vault.sui.jsonrpc_client import SuiJsonRpcClient
from earnout_vault.sui.ledger import LedgerQueryAdapter
from earnout_vault.walrus.exceptions import StorageError
from earnout_vault.walrus.http_client import WalrusHttpClient


@pytest.fixture(scope="session")
def integration_settings() -> Settings:
    if not os.environ.get("EARNOUT_INTEGRATION"):
        pytest.skip("Set EARNOUT_INTEGRATION=1 to run tests against the live networks")
    return Settings()


@pytest.fixture(scope="session")
def walrus_client(integration_settings: Settings) -> Generator[WalrusHttpClient, None, None]:
    client = WalrusHttpClient(
        publisher_url=integration_settings.walrus_publisher_url,
        aggregator_url=integration_settings.walrus_aggregator_url,
        storage_node_url=integration_settings.walrus_storage_node_url,
        timeout_seconds=integration_settings.request_timeout_seconds,
        storage_price_per_unit=integration_settings.walrus_storage_price_per_unit,
        write_price_per_unit=integration_settings.walrus_write_price_per_unit,
    )
    try:
        client.current_epoch()
    except StorageError as e:
        client.close()
        pytest.skip(f"Walrus storage node not reachable: {e}")
    yield client
    client.close()


@pytest.fixture(scope="session")
def ledger(integration_settings: Settings) -> Generator[LedgerQueryAdapter, None, None]:
    if not integration_settings.earnout_package_id:
        pytest.skip("EARNOUT_PACKAGE_ID is not set")
    client = SuiJsonRpcClient(
        rpc_url=integration_settings.resolved_sui_rpc_url(),
        timeout_seconds=integration_settings.request_timeout_seconds,
    )
    try:
        client.query_events("0x2::coin::CoinMetadata", limit=1)
    except LedgerError as e:
        client.close()
        pytest.skip(f"Sui RPC not reachable: {e}")
    yield LedgerQueryAdapter(
        client,
        package_id=integration_settings.earnout_package_id,
        audit_event_limit=integration_settings.audit_event_limit,
    )
    client.close()


@pytest.fixture(scope="session")
def deal_id() -> str:
    deal_id = os.environ.get("EARNOUT_TEST_DEAL_ID", "")
    if not deal_id:
        pytest.skip("EARNOUT_TEST_DEAL_ID is not set")
    return deal_id
