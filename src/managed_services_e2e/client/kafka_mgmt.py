"""Kafka management API: Kafka instances and service accounts."""

from __future__ import annotations

from typing import Any

import structlog

from managed_services_e2e.client.base import ApiClient
from managed_services_e2e.config.models import ApiConfig

logger = structlog.get_logger()

KAFKAS_PATH = "/api/kafkas_mgmt/v1/kafkas"
SERVICE_ACCOUNTS_PATH = "/api/kafkas_mgmt/v1/service_accounts"


class KafkaMgmtClient(ApiClient):
    """Client for the Kafka instance and service account endpoints."""

    def __init__(self, config: ApiConfig | None = None) -> None:
        config = config or ApiConfig()
        super().__init__(config.service_api_url, config)

    # -- Kafka instances -------------------------------------------------------

    async def create_kafka(
        self, payload: dict[str, Any], *, async_: bool = True
    ) -> dict[str, Any]:
        """Request a new Kafka instance; provisioning continues remotely."""
        kafka = await self._request(
            "POST",
            KAFKAS_PATH,
            params={"async": str(async_).lower()},
            json=payload,
        )
        logger.info("kafka.create_requested", name=payload.get("name"), id=kafka["id"])
        return kafka  # type: ignore[no-any-return]

    async def get_kafka(self, kafka_id: str) -> dict[str, Any]:
        return await self._request("GET", f"{KAFKAS_PATH}/{kafka_id}")  # type: ignore[no-any-return]

    async def list_kafkas(
        self,
        *,
        page: int = 1,
        size: int = 100,
        search: str | None = None,
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"page": page, "size": size}
        if search is not None:
            params["search"] = search
        data = await self._request("GET", KAFKAS_PATH, params=params)
        return list(data.get("items") or [])

    async def get_kafkas_by_name(self, name: str) -> list[dict[str, Any]]:
        return await self.list_kafkas(search=f"name = {name}")

    async def delete_kafka(self, kafka_id: str, *, async_: bool = True) -> None:
        await self._request(
            "DELETE",
            f"{KAFKAS_PATH}/{kafka_id}",
            params={"async": str(async_).lower()},
        )
        logger.info("kafka.delete_requested", id=kafka_id)

    # -- Service accounts ------------------------------------------------------

    async def create_service_account(self, payload: dict[str, Any]) -> dict[str, Any]:
        account = await self._request("POST", SERVICE_ACCOUNTS_PATH, json=payload)
        logger.info(
            "service_account.created", name=payload.get("name"), id=account["id"]
        )
        return account  # type: ignore[no-any-return]

    async def get_service_account(self, account_id: str) -> dict[str, Any]:
        return await self._request(  # type: ignore[no-any-return]
            "GET", f"{SERVICE_ACCOUNTS_PATH}/{account_id}"
        )

    async def list_service_accounts(self) -> list[dict[str, Any]]:
        data = await self._request("GET", SERVICE_ACCOUNTS_PATH)
        return list(data.get("items") or [])

    async def get_service_accounts_by_name(self, name: str) -> list[dict[str, Any]]:
        # The endpoint has no search filter.
        return [a for a in await self.list_service_accounts() if a.get("name") == name]

    async def delete_service_account(self, account_id: str) -> None:
        await self._request("DELETE", f"{SERVICE_ACCOUNTS_PATH}/{account_id}")
        logger.info("service_account.deleted", id=account_id)
