from typing import Any

import httpx

from earnout_vault.logging.logger import Log
from earnout_vault.walrus.client_base import BaseStorageClient, storage_units
from earnout_vault.walrus.exceptions import StorageError
from earnout_vault.walrus.models import StorageCost, WrittenBlob


class WalrusHttpClient(BaseStorageClient):
    """Storage client for the Walrus HTTP publisher, aggregator and storage node APIs.

    Writes go through the publisher (the relay that encodes and distributes
    slivers), reads through the aggregator, and metadata/epoch queries hit a
    storage node directly. Prices are configured per 1 MiB storage unit.
    """

    def __init__(
        self,
        *,
        publisher_url: str,
        aggregator_url: str,
        storage_node_url: str,
        timeout_seconds: int,
        storage_price_per_unit: int,
        write_price_per_unit: int,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._publisher_url = publisher_url.rstrip("/")
        self._aggregator_url = aggregator_url.rstrip("/")
        self._storage_node_url = storage_node_url.rstrip("/")
        self._storage_price_per_unit = storage_price_per_unit
        self._write_price_per_unit = write_price_per_unit
        self._client = httpx.Client(timeout=timeout_seconds, transport=transport)

    def write_blob(
        self,
        data: bytes,
        *,
        epochs: int,
        deletable: bool,
        owner_address: str,
    ) -> WrittenBlob:
        params: dict[str, str | int] = {"epochs": epochs}
        if deletable:
            params["deletable"] = "true"
        if owner_address:
            params["send_object_to"] = owner_address
        response = self._request(
            "PUT", f"{self._publisher_url}/v1/blobs", params=params, content=data
        )
        return self._parse_store_response(self._json(response))

    def read_blob(self, blob_id: str) -> bytes:
        response = self._request("GET", f"{self._aggregator_url}/v1/blobs/{blob_id}")
        return response.content

    def get_blob_metadata(self, blob_id: str) -> dict[str, Any]:
        response = self._request(
            "GET",
            f"{self._storage_node_url}/v1/blobs/{blob_id}/metadata",
            headers={"Accept": "application/json"},
        )
        data = self._unwrap(self._json(response))
        if "metadata" in data:
            return data
        return {"metadata": data}

    def current_epoch(self) -> int:
        response = self._request("GET", f"{self._storage_node_url}/v1/health")
        data = self._unwrap(self._json(response))
        if "epoch" not in data:
            raise StorageError("Storage node health response has no epoch")
        return int(data["epoch"])

    def storage_cost(self, size: int, epochs: int) -> StorageCost:
        units = storage_units(size)
        return StorageCost(
            storage_cost=units * self._storage_price_per_unit * epochs,
            write_cost=units * self._write_price_per_unit,
        )

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        Log.debug("Walrus request", method=method, url=url)
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise StorageError(f"Walrus network error: {exc}") from exc
        if response.status_code == httpx.codes.NOT_FOUND:
            raise StorageError(f"Blob not found or unavailable: {url}")
        if response.is_error:
            raise StorageError(
                f"Walrus returned HTTP {response.status_code}: {response.text[:200]}"
            )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as exc:
            raise StorageError(f"Walrus returned invalid JSON: {exc}") from exc
        if not isinstance(body, dict):
            raise StorageError("Walrus response must be a JSON object")
        return body

    @staticmethod
    def _unwrap(body: dict[str, Any]) -> dict[str, Any]:
        # Storage nodes wrap payloads as {"success": {"code": 200, "data": ...}}.
        success = body.get("success")
        if isinstance(success, dict) and isinstance(success.get("data"), dict):
            return success["data"]
        return body

    @staticmethod
    def _parse_store_response(body: dict[str, Any]) -> WrittenBlob:
        if "newlyCreated" in body:
            blob_object = body["newlyCreated"].get("blobObject") or {}
            return WrittenBlob(
                blob_id=str(blob_object.get("blobId") or ""),
                certificate=blob_object,
            )
        if "alreadyCertified" in body:
            certified = body["alreadyCertified"]
            return WrittenBlob(
                blob_id=str(certified.get("blobId") or ""),
                certificate=certified,
            )
        raise StorageError(f"Unrecognized publisher response keys: {sorted(body)}")
