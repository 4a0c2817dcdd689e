"""Kafka service API scenario.

create Kafka instance → create service account → create topic → list and
search → create with an existing name → produce/consume → delete topic →
delete Kafka instance and verify it is unreachable → cleanup.
"""

from __future__ import annotations

import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

from managed_services_e2e.client.auth import KafkaCredentials
from managed_services_e2e.client.kafka_admin import KafkaAdmin
from managed_services_e2e.client.messaging import receive_message, send_message
from managed_services_e2e.config.models import E2EConfig
from managed_services_e2e.lifecycle.adapters import TopicAdapter
from managed_services_e2e.lifecycle.conflict import AlreadyExists, Created, CreateFailed
from managed_services_e2e.lifecycle.control_plane import ControlPlane
from managed_services_e2e.lifecycle.models import ResourceKind
from managed_services_e2e.scenario.runner import Step, expect
from managed_services_e2e.scenario.state import ScenarioState

logger = structlog.get_logger()

KAFKA = ResourceKind.KAFKA_INSTANCE
SERVICE_ACCOUNT = ResourceKind.SERVICE_ACCOUNT
TOPIC = ResourceKind.TOPIC

SendFn = Callable[..., Awaitable[None]]
ReceiveFn = Callable[..., Awaitable[str]]


@dataclass
class ServiceApiScenario:
    """Builds the ordered steps of the Kafka service API scenario."""

    config: E2EConfig
    control_plane: ControlPlane
    admin_factory: Callable[[KafkaCredentials], KafkaAdmin] = KafkaAdmin
    send: SendFn = field(default=send_message)
    receive: ReceiveFn = field(default=receive_message)

    def kafka_payload(self) -> dict[str, Any]:
        spec = self.config.kafka_instance
        return {
            "name": self.config.kafka_instance_name,
            "cloud_provider": spec.cloud_provider,
            "region": spec.region,
            "multi_az": spec.multi_az,
        }

    def _credentials(self, state: ScenarioState) -> KafkaCredentials:
        return KafkaCredentials.from_handles(
            state.require(KAFKA), state.require(SERVICE_ACCOUNT)
        )

    # -- Steps -----------------------------------------------------------------

    async def create_kafka_instance(self, state: ScenarioState) -> None:
        handle = await self.control_plane.apply_or_reuse(KAFKA, self.kafka_payload())
        state.put(handle)

    async def create_service_account(self, state: ScenarioState) -> None:
        name = self.config.service_account_name
        # The client secret is only returned on creation.
        await self.control_plane.delete_by_name_if_exists(SERVICE_ACCOUNT, name)
        handle = await self.control_plane.apply_or_reuse(SERVICE_ACCOUNT, {"name": name})
        state.put(handle)

    async def create_topic(self, state: ScenarioState) -> None:
        credentials = self._credentials(state)
        logger.info(
            "kafka_admin.init",
            host=credentials.bootstrap_host,
            client_id=credentials.client_id,
        )
        self.control_plane.register(TopicAdapter(self.admin_factory(credentials)))
        handle = await self.control_plane.apply_or_reuse(
            TOPIC, {"name": self.config.topic_name}
        )
        state.put(handle)

    async def list_and_search_kafka_instance(self, state: ScenarioState) -> None:
        kafka = state.require(KAFKA)
        lifecycle = self.control_plane.lifecycle(KAFKA)

        listed = await lifecycle.adapter.list_all()
        expect(bool(listed), "kafka instance list is empty")
        matches = [raw for raw in listed if raw.get("name") == kafka.name]
        expect(
            len(matches) == 1,
            f"expected exactly one kafka instance named {kafka.name}, found {len(matches)}",
        )

        found = await lifecycle.get_by_name(kafka.name)
        if found is None:
            raise AssertionError(f"kafka instance {kafka.name} not found by name")
        expect(found.name == kafka.name, f"search returned {found.name}")
        expect(found.id == kafka.id, f"search returned id {found.id}, expected {kafka.id}")

    async def create_kafka_instance_with_existing_name(self, state: ScenarioState) -> None:
        state.require(KAFKA)
        outcome = await self.control_plane.try_create(KAFKA, self.kafka_payload())
        match outcome:
            case AlreadyExists(name=name):
                logger.info("kafka.duplicate_name_rejected", name=name)
            case Created(handle=handle):
                # Left for the cleanup step, which deletes every match by name.
                raise AssertionError(
                    f"kafka instance with existing name was created: {handle.id}"
                )
            case CreateFailed(error=error):
                raise error

    async def produce_and_consume(self, state: ScenarioState) -> None:
        state.require(TOPIC)
        credentials = self._credentials(state)
        topic = self.config.topic_name
        group_id = f"{self.config.kafka_instance_name}-{uuid.uuid4().hex[:8]}"

        await self.send(
            credentials, topic, self.config.message,
            timeout=self.config.message_timeout_seconds,
        )
        received = await self.receive(
            credentials, topic,
            group_id=group_id, timeout=self.config.message_timeout_seconds,
        )
        expect(
            received == self.config.message,
            f"received {received!r}, expected {self.config.message!r}",
        )

    async def delete_topic(self, state: ScenarioState) -> None:
        topic = state.require(TOPIC)
        lifecycle = self.control_plane.lifecycle(TOPIC)
        await lifecycle.delete(topic.id)
        await lifecycle.wait_until_deleted(topic.id)
        state.discard(TOPIC)

    async def delete_kafka_instance_and_verify_unreachable(
        self, state: ScenarioState
    ) -> None:
        kafka = state.require(KAFKA)
        credentials = self._credentials(state)

        lifecycle = self.control_plane.lifecycle(KAFKA)
        await lifecycle.delete(kafka.id)
        await lifecycle.wait_until_deleted(kafka.id)
        state.discard(KAFKA)

        try:
            await self.send(
                credentials, self.config.topic_name, self.config.message,
                timeout=self.config.message_timeout_seconds,
            )
        except Exception as exc:
            logger.info("message.send_failed_as_expected", error=str(exc))
            return
        raise AssertionError("sending to a deleted kafka instance should fail")

    async def cleanup_kafka_instance(self, state: ScenarioState) -> None:
        await self.control_plane.delete_by_name_if_exists(
            KAFKA, self.config.kafka_instance_name
        )
        state.discard(KAFKA)

    async def cleanup_service_account(self, state: ScenarioState) -> None:
        await self.control_plane.delete_by_name_if_exists(
            SERVICE_ACCOUNT, self.config.service_account_name
        )
        state.discard(SERVICE_ACCOUNT)

    def steps(self) -> list[Step]:
        return [
            Step("create_kafka_instance", self.create_kafka_instance),
            Step("create_service_account", self.create_service_account),
            Step("create_topic", self.create_topic, requires=(KAFKA, SERVICE_ACCOUNT)),
            Step(
                "list_and_search_kafka_instance",
                self.list_and_search_kafka_instance,
                requires=(KAFKA,),
            ),
            Step(
                "create_kafka_instance_with_existing_name",
                self.create_kafka_instance_with_existing_name,
                requires=(KAFKA,),
            ),
            Step(
                "produce_and_consume",
                self.produce_and_consume,
                requires=(KAFKA, SERVICE_ACCOUNT, TOPIC),
            ),
            Step("delete_topic", self.delete_topic, requires=(TOPIC,)),
            Step(
                "delete_kafka_instance_and_verify_unreachable",
                self.delete_kafka_instance_and_verify_unreachable,
                requires=(KAFKA, SERVICE_ACCOUNT),
            ),
            Step("cleanup_kafka_instance", self.cleanup_kafka_instance, cleanup=True),
            Step("cleanup_service_account", self.cleanup_service_account, cleanup=True),
        ]
