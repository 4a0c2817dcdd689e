"""Service registry management API."""

from __future__ import annotations

from typing import Any

import structlog

from managed_services_e2e.client.base import ApiClient
from managed_services_e2e.config.models import ApiConfig

logger = structlog.get_logger()

REGISTRIES_PATH = "/api/serviceregistry_mgmt/v1/registries"

# Names are not unique remotely; a lookup by name returns at most this many.
MAX_REGISTRIES_BY_NAME = 10


class RegistriesClient(ApiClient):
    """Client for the schema registry instance endpoints."""

    def __init__(self, config: ApiConfig | None = None) -> None:
        config = config or ApiConfig()
        super().__init__(config.registry_api_url, config)

    async def create_registry(self, payload: dict[str, Any]) -> dict[str, Any]:
        registry = await self._request("POST", REGISTRIES_PATH, json=payload)
        logger.info("registry.create_requested", name=payload.get("name"), id=registry["id"])
        return registry  # type: ignore[no-any-return]

    async def get_registry(self, registry_id: str) -> dict[str, Any]:
        return await self._request("GET", f"{REGISTRIES_PATH}/{registry_id}")  # type: ignore[no-any-return]

    async def list_registries(
        self,
        *,
        page: int = 1,
        size: int = MAX_REGISTRIES_BY_NAME,
        search: str | None = None,
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"page": page, "size": size}
        if search is not None:
            params["search"] = search
        data = await self._request("GET", REGISTRIES_PATH, params=params)
        return list(data.get("items") or [])

    async def get_registries_by_name(self, name: str) -> list[dict[str, Any]]:
        return await self.list_registries(search=f"name = {name}")

    async def delete_registry(self, registry_id: str) -> None:
        await self._request("DELETE", f"{REGISTRIES_PATH}/{registry_id}")
        logger.info("registry.delete_requested", id=registry_id)
