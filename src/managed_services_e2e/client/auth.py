"""Kafka client authentication for managed Kafka instances."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import SecretStr

from managed_services_e2e.lifecycle.models import ResourceHandle


@dataclass(frozen=True)
class KafkaCredentials:
    """Bootstrap host plus the service account used to authenticate to it."""

    bootstrap_host: str
    client_id: str
    client_secret: SecretStr = field(repr=False)

    @classmethod
    def from_handles(
        cls, kafka: ResourceHandle, service_account: ResourceHandle
    ) -> KafkaCredentials:
        """Build credentials from a ready Kafka instance and a service account."""
        host = kafka.raw.get("bootstrap_server_host")
        if not host:
            msg = f"kafka instance {kafka.id} has no bootstrap_server_host yet"
            raise ValueError(msg)
        client_id = service_account.raw.get("client_id")
        client_secret = service_account.raw.get("client_secret")
        if not client_id or not client_secret:
            msg = f"service account {service_account.id} has no client credentials"
            raise ValueError(msg)
        return cls(
            bootstrap_host=host,
            client_id=client_id,
            client_secret=SecretStr(client_secret),
        )


def build_kafka_auth_config(credentials: KafkaCredentials) -> dict[str, Any]:
    """Build confluent_kafka config entries for SASL/PLAIN over TLS.

    Returns a dict to pass to Consumer/Producer/AdminClient constructors.
    """
    return {
        "bootstrap.servers": credentials.bootstrap_host,
        "security.protocol": "SASL_SSL",
        "sasl.mechanism": "PLAIN",
        "sasl.username": credentials.client_id,
        "sasl.password": credentials.client_secret.get_secret_value(),
    }
