"""Produce and consume single messages against a managed Kafka instance."""

from __future__ import annotations

import asyncio
import threading
import time
from collections.abc import Callable
from typing import Any

import structlog
from confluent_kafka import Consumer, KafkaError, Message, Producer

from managed_services_e2e.client.auth import KafkaCredentials, build_kafka_auth_config

logger = structlog.get_logger()

# Upper bound on a single blocking librdkafka call; the stop flag is checked
# between calls.
POLL_SECONDS = 0.5


class MessagingError(Exception):
    """Raised when a message could not be delivered or received in time."""


def create_producer(credentials: KafkaCredentials, *, timeout: float) -> Producer:
    """Create a producer whose delivery reports fail after *timeout* seconds."""
    return Producer(
        {
            **build_kafka_auth_config(credentials),
            "acks": "all",
            "message.timeout.ms": int(timeout * 1000),
        }
    )


def create_consumer(credentials: KafkaCredentials, group_id: str) -> Consumer:
    return Consumer(
        {
            **build_kafka_auth_config(credentials),
            "group.id": group_id,
            "auto.offset.reset": "earliest",
            "enable.auto.commit": False,
        }
    )


def _produce(
    producer: Producer, topic: str, value: str, timeout: float, stop: threading.Event
) -> None:
    errors: list[KafkaError] = []

    def _on_delivery(err: KafkaError | None, msg: Message) -> None:
        if err is not None:
            errors.append(err)

    producer.produce(topic=topic, value=value.encode(), on_delivery=_on_delivery)
    deadline = time.monotonic() + timeout
    while True:
        left = max(deadline - time.monotonic(), 0.0)
        remaining = producer.flush(timeout=min(POLL_SECONDS, left))
        if not remaining or stop.is_set() or time.monotonic() >= deadline:
            break
    if stop.is_set():
        return
    if errors:
        raise MessagingError(f"delivery to '{topic}' failed: {errors[0]}")
    if remaining:
        raise MessagingError(
            f"{remaining} message(s) to '{topic}' not delivered within {timeout}s"
        )


def _consume_one(
    consumer: Consumer, topic: str, timeout: float, stop: threading.Event
) -> str | None:
    consumer.subscribe([topic])
    deadline = time.monotonic() + timeout
    while not stop.is_set() and (remaining := deadline - time.monotonic()) > 0:
        msg = consumer.poll(timeout=min(POLL_SECONDS, remaining))
        if msg is None:
            continue
        err = msg.error()
        if err and err.code() == KafkaError._PARTITION_EOF:  # type: ignore[attr-defined]
            continue
        if err:
            raise MessagingError(f"consume from '{topic}' failed: {err}")
        value = msg.value()
        return value.decode() if value is not None else ""
    if stop.is_set():
        return None
    raise MessagingError(f"no message received from '{topic}' within {timeout}s")


async def _run_blocking(func: Callable[..., Any], *args: Any) -> Any:
    """Run *func* in the default executor with a stop flag as its last argument.

    On cancellation the flag is set and the worker thread is awaited before
    the cancellation propagates, so no client call outlives the caller.
    """
    stop = threading.Event()
    loop = asyncio.get_running_loop()
    future = loop.run_in_executor(None, func, *args, stop)
    try:
        return await asyncio.shield(future)
    except asyncio.CancelledError:
        stop.set()
        await asyncio.wait({future})
        raise


async def send_message(
    credentials: KafkaCredentials,
    topic: str,
    value: str,
    *,
    timeout: float = 30.0,
) -> None:
    """Produce one message and wait for its delivery report."""
    producer = create_producer(credentials, timeout=timeout)
    logger.info("message.send", topic=topic)
    await _run_blocking(_produce, producer, topic, value, timeout)


async def receive_message(
    credentials: KafkaCredentials,
    topic: str,
    *,
    group_id: str,
    timeout: float = 60.0,
) -> str:
    """Consume the first available message of *topic* from the earliest offset."""
    consumer = create_consumer(credentials, group_id)
    loop = asyncio.get_running_loop()
    try:
        value: str = await _run_blocking(_consume_one, consumer, topic, timeout)
    finally:
        # The polling thread has returned by now; close runs on its own.
        await loop.run_in_executor(None, consumer.close)
    logger.info("message.received", topic=topic)
    return value
