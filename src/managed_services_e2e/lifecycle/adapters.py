"""Per-kind adapters that fetch, list, create, delete and classify remote resources."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from managed_services_e2e.client.errors import TopicNotFoundError
from managed_services_e2e.client.kafka_admin import KafkaAdmin
from managed_services_e2e.client.kafka_mgmt import KafkaMgmtClient
from managed_services_e2e.client.registry import RegistriesClient
from managed_services_e2e.lifecycle.models import Readiness, ResourceHandle, ResourceKind


@runtime_checkable
class ResourceAdapter(Protocol):
    """Uniform view of one resource kind for the lifecycle layer.

    ``fetch`` and ``delete`` raise ``ResourceNotFound`` subclasses when the
    resource does not exist; ``create`` raises a ``ResourceConflict`` subclass
    when the name is taken.
    """

    kind: ResourceKind

    async def fetch(self, resource_id: str) -> dict[str, Any]: ...

    async def list_by_name(self, name: str) -> list[dict[str, Any]]: ...

    async def list_all(self) -> list[dict[str, Any]]: ...

    async def create(self, payload: dict[str, Any]) -> dict[str, Any]: ...

    async def delete(self, resource_id: str) -> None: ...

    def status_of(self, raw: dict[str, Any]) -> str: ...

    def classify(self, raw: dict[str, Any]) -> Readiness: ...


def to_handle(kind: ResourceKind, raw: dict[str, Any]) -> ResourceHandle:
    return ResourceHandle(id=str(raw["id"]), name=str(raw.get("name", "")), kind=kind, raw=raw)


class KafkaInstanceAdapter:
    """Kafka instances: accepted → preparing → provisioning → ready.

    An instance being torn down never becomes ready, so teardown statuses
    classify as failed.
    """

    kind = ResourceKind.KAFKA_INSTANCE

    READY = "ready"
    FAILED = "failed"
    TEARING_DOWN = frozenset({"deprovision", "deleting"})

    def __init__(self, client: KafkaMgmtClient) -> None:
        self._client = client

    async def fetch(self, resource_id: str) -> dict[str, Any]:
        return await self._client.get_kafka(resource_id)

    async def list_by_name(self, name: str) -> list[dict[str, Any]]:
        return await self._client.get_kafkas_by_name(name)

    async def list_all(self) -> list[dict[str, Any]]:
        return await self._client.list_kafkas()

    async def create(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._client.create_kafka(payload)

    async def delete(self, resource_id: str) -> None:
        await self._client.delete_kafka(resource_id)

    def status_of(self, raw: dict[str, Any]) -> str:
        return str(raw.get("status", "")).lower()

    def classify(self, raw: dict[str, Any]) -> Readiness:
        status = self.status_of(raw)
        if status == self.READY:
            return Readiness.READY
        if status == self.FAILED or status in self.TEARING_DOWN:
            return Readiness.FAILED
        return Readiness.NOT_READY


class RegistryAdapter:
    """Schema registries: ready or not."""

    kind = ResourceKind.REGISTRY

    def __init__(self, client: RegistriesClient) -> None:
        self._client = client

    async def fetch(self, resource_id: str) -> dict[str, Any]:
        return await self._client.get_registry(resource_id)

    async def list_by_name(self, name: str) -> list[dict[str, Any]]:
        return await self._client.get_registries_by_name(name)

    async def list_all(self) -> list[dict[str, Any]]:
        return await self._client.list_registries()

    async def create(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._client.create_registry(payload)

    async def delete(self, resource_id: str) -> None:
        await self._client.delete_registry(resource_id)

    def status_of(self, raw: dict[str, Any]) -> str:
        return str(raw.get("status", "")).lower()

    def classify(self, raw: dict[str, Any]) -> Readiness:
        status = self.status_of(raw)
        if status == "ready":
            return Readiness.READY
        if status == "failed":
            return Readiness.FAILED
        return Readiness.NOT_READY


class ServiceAccountAdapter:
    """Service accounts are usable as soon as they can be fetched."""

    kind = ResourceKind.SERVICE_ACCOUNT

    def __init__(self, client: KafkaMgmtClient) -> None:
        self._client = client

    async def fetch(self, resource_id: str) -> dict[str, Any]:
        return await self._client.get_service_account(resource_id)

    async def list_by_name(self, name: str) -> list[dict[str, Any]]:
        return await self._client.get_service_accounts_by_name(name)

    async def list_all(self) -> list[dict[str, Any]]:
        return await self._client.list_service_accounts()

    async def create(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._client.create_service_account(payload)

    async def delete(self, resource_id: str) -> None:
        await self._client.delete_service_account(resource_id)

    def status_of(self, raw: dict[str, Any]) -> str:
        return "exists"

    def classify(self, raw: dict[str, Any]) -> Readiness:
        return Readiness.READY


class TopicAdapter:
    """Topics are identified by name and ready once in the cluster metadata."""

    kind = ResourceKind.TOPIC

    def __init__(self, admin: KafkaAdmin) -> None:
        self._admin = admin

    async def fetch(self, resource_id: str) -> dict[str, Any]:
        return await self._admin.describe_topic(resource_id)

    async def list_by_name(self, name: str) -> list[dict[str, Any]]:
        try:
            return [await self._admin.describe_topic(name)]
        except TopicNotFoundError:
            return []

    async def list_all(self) -> list[dict[str, Any]]:
        return [{"id": name, "name": name} for name in await self._admin.list_topics()]

    async def create(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._admin.create_topic(
            payload["name"], num_partitions=payload.get("partitions", 1)
        )

    async def delete(self, resource_id: str) -> None:
        await self._admin.delete_topic(resource_id)

    def status_of(self, raw: dict[str, Any]) -> str:
        return "exists"

    def classify(self, raw: dict[str, Any]) -> Readiness:
        return Readiness.READY
