"""Topic administration on a managed Kafka instance."""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from confluent_kafka import KafkaError, KafkaException
from confluent_kafka.admin import AdminClient, NewTopic  # type: ignore[attr-defined]

from managed_services_e2e.client.auth import KafkaCredentials, build_kafka_auth_config
from managed_services_e2e.client.errors import (
    KafkaAdminError,
    TopicExistsError,
    TopicNotFoundError,
)

logger = structlog.get_logger()


def _error_code(exc: BaseException) -> Any:
    if isinstance(exc, KafkaException) and exc.args:
        err = exc.args[0]
        if isinstance(err, KafkaError):
            return err.code()
    return None


class KafkaAdmin:
    """Async facade over ``confluent_kafka.admin.AdminClient``.

    The admin client is blocking, so every call runs in the default executor.
    """

    def __init__(
        self,
        credentials: KafkaCredentials,
        *,
        replication_factor: int = 3,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._replication_factor = replication_factor
        self._timeout = timeout_seconds
        self._admin = AdminClient(build_kafka_auth_config(credentials))

    async def _run(self, fn: Any, *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, fn, *args)

    def _create_topic(self, name: str, num_partitions: int) -> None:
        futures = self._admin.create_topics(
            [
                NewTopic(
                    name,
                    num_partitions=num_partitions,
                    replication_factor=self._replication_factor,
                )
            ],
            request_timeout=self._timeout,
        )
        try:
            futures[name].result()
        except KafkaException as exc:
            if _error_code(exc) == KafkaError.TOPIC_ALREADY_EXISTS:
                raise TopicExistsError(f"topic '{name}' already exists") from exc
            raise KafkaAdminError(f"failed to create topic '{name}': {exc}") from exc

    def _describe_topic(self, name: str) -> dict[str, Any]:
        meta = self._admin.list_topics(topic=name, timeout=self._timeout)
        topic = meta.topics.get(name)
        if topic is None or (
            topic.error is not None
            and topic.error.code() == KafkaError.UNKNOWN_TOPIC_OR_PART
        ):
            raise TopicNotFoundError(f"topic '{name}' not found")
        if topic.error is not None:
            raise KafkaAdminError(f"failed to describe topic '{name}': {topic.error}")
        return {"id": name, "name": name, "partitions": len(topic.partitions)}

    def _list_topics(self) -> list[str]:
        meta = self._admin.list_topics(timeout=self._timeout)
        return sorted(meta.topics.keys())

    def _delete_topic(self, name: str) -> None:
        futures = self._admin.delete_topics([name], request_timeout=self._timeout)
        try:
            futures[name].result()
        except KafkaException as exc:
            if _error_code(exc) == KafkaError.UNKNOWN_TOPIC_OR_PART:
                raise TopicNotFoundError(f"topic '{name}' not found") from exc
            raise KafkaAdminError(f"failed to delete topic '{name}': {exc}") from exc

    async def create_topic(self, name: str, *, num_partitions: int = 1) -> dict[str, Any]:
        await self._run(self._create_topic, name, num_partitions)
        logger.info("topic.created", topic=name)
        return {"id": name, "name": name, "partitions": num_partitions}

    async def describe_topic(self, name: str) -> dict[str, Any]:
        return await self._run(self._describe_topic, name)  # type: ignore[no-any-return]

    async def list_topics(self) -> list[str]:
        return await self._run(self._list_topics)  # type: ignore[no-any-return]

    async def delete_topic(self, name: str) -> None:
        await self._run(self._delete_topic, name)
        logger.info("topic.deleted", topic=name)
