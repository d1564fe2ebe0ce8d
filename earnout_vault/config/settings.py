from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    request_timeout_seconds: int = 30

    sui_network: str = "testnet"
    sui_rpc_url: str = ""
    sui_backend_private_key: str = ""

    earnout_package_id: str = ""
    audit_event_limit: int = 1000

    storage_backend: str = "walrus"
    walrus_publisher_url: str = "https://publisher.walrus-testnet.walrus.space"
    walrus_aggregator_url: str = "https://aggregator.walrus-testnet.walrus.space"
    walrus_storage_node_url: str = "https://walrus-testnet-storage.nodes.guru:9185"
    walrus_storage_epochs: int = 5
    walrus_max_file_size: int = 100 * 1024 * 1024
    walrus_storage_price_per_unit: int = 100_000
    walrus_write_price_per_unit: int = 20_000

    enable_server_encryption: bool = True
    seal_backend: str = "relay"
    seal_relay_url: str = "http://localhost:8787"
    seal_policy_object_id: str = ""
    seal_key_server_object_ids: str = ""
    seal_threshold: int = 2
    seal_session_ttl_minutes: int = 10
    seal_approve_function: str = "seal_approve"
    seal_require_approval_transaction: bool = True

    access_insecure_bypass: bool = False

    def resolved_sui_rpc_url(self) -> str:
        """Return the configured RPC URL, or the public fullnode for the network."""
        if self.sui_rpc_url:
            return self.sui_rpc_url
        return f"https://fullnode.{self.sui_network}.sui.io:443"
