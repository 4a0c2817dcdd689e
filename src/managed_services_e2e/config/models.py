"""Pydantic configuration models for the end-to-end harness."""

from __future__ import annotations

import re
from enum import StrEnum

from pydantic import BaseModel, Field, SecretStr, field_validator


class ResourceKind(StrEnum):
    """Kinds of remote resources managed by the harness."""

    KAFKA_INSTANCE = "kafka_instance"
    REGISTRY = "registry"
    SERVICE_ACCOUNT = "service_account"
    TOPIC = "topic"


class ApiConfig(BaseModel):
    """Control plane REST API settings."""

    service_api_url: str = "https://api.stage.openshift.com"
    registry_api_url: str = "https://api.stage.openshift.com"
    # Bearer token; acquiring it is left to the caller.
    token: SecretStr | None = None
    timeout_seconds: float = Field(default=30.0, gt=0)
    retry_max_attempts: int = Field(default=5, ge=1)
    retry_wait_seconds: float = Field(default=2.0, gt=0)


class PollConfig(BaseModel):
    """Interval and budget of a single poll session."""

    interval_seconds: float = Field(default=3.0, gt=0)
    timeout_seconds: float = Field(default=60.0, gt=0)


class KindTimings(BaseModel):
    """Readiness and deletion poll settings for one resource kind."""

    ready: PollConfig = PollConfig()
    deleted: PollConfig = PollConfig()


class LifecycleConfig(BaseModel):
    """Per-kind poll settings."""

    kafka_instance: KindTimings = KindTimings(
        ready=PollConfig(interval_seconds=3.0, timeout_seconds=900.0),
        deleted=PollConfig(interval_seconds=3.0, timeout_seconds=300.0),
    )
    registry: KindTimings = KindTimings(
        ready=PollConfig(interval_seconds=3.0, timeout_seconds=60.0),
        deleted=PollConfig(interval_seconds=1.0, timeout_seconds=20.0),
    )
    service_account: KindTimings = KindTimings(
        ready=PollConfig(interval_seconds=1.0, timeout_seconds=30.0),
        deleted=PollConfig(interval_seconds=1.0, timeout_seconds=30.0),
    )
    topic: KindTimings = KindTimings(
        ready=PollConfig(interval_seconds=1.0, timeout_seconds=30.0),
        deleted=PollConfig(interval_seconds=1.0, timeout_seconds=60.0),
    )

    def for_kind(self, kind: ResourceKind) -> KindTimings:
        return getattr(self, kind.value)  # type: ignore[no-any-return]


class KafkaInstanceSpec(BaseModel):
    """Placement of the Kafka instances created by the scenarios."""

    cloud_provider: str = "aws"
    region: str = "us-east-1"
    multi_az: bool = True


class E2EConfig(BaseModel, extra="forbid"):
    """Top-level harness configuration."""

    name_postfix: str = "local"
    api: ApiConfig = ApiConfig()
    lifecycle: LifecycleConfig = LifecycleConfig()
    kafka_instance: KafkaInstanceSpec = KafkaInstanceSpec()
    topic_name: str = "test-topic"
    message: str = "hello world"
    message_timeout_seconds: float = Field(default=60.0, gt=0)
    scenario_timeout_seconds: float = Field(default=1800.0, gt=0)
    cleanup_timeout_seconds: float = Field(default=600.0, gt=0)

    @field_validator("name_postfix")
    @classmethod
    def validate_name_postfix(cls, v: str) -> str:
        """Resource names are DNS-like, so the postfix is restricted too."""
        if not re.fullmatch(r"[a-z0-9][a-z0-9-]*", v):
            msg = (
                f"name_postfix '{v}' must contain only lowercase letters, "
                f"digits and '-'"
            )
            raise ValueError(msg)
        return v

    @property
    def kafka_instance_name(self) -> str:
        return f"mk-e2e-{self.name_postfix}"

    @property
    def service_account_name(self) -> str:
        return f"mk-e2e-sa-{self.name_postfix}"

    @property
    def registry_name(self) -> str:
        return f"mk-e2e-sr-{self.name_postfix}"
