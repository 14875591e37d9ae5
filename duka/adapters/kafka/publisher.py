"""Kafka Publisher – DIP adapter for EventPublisher.

Backpressure-safe publish wrapping SerializingProducer.
"""
from __future__ import annotations

import logging
from typing import Mapping, Optional

from confluent_kafka import SerializingProducer

from duka.ports.event_publisher import EventPublisher

logger = logging.getLogger(__name__)


def _on_delivery(err, msg) -> None:
    if err is not None:
        logger.error("DELIVERY_FAILED | topic=%s | error=%s", msg.topic() if msg else None, err)


class KafkaPublisher(EventPublisher):
    """SRP: only concern is delivery to Kafka."""

    def __init__(self, producer: SerializingProducer) -> None:
        self._producer = producer

    def publish(
        self,
        topic: str,
        key: str,
        value: bytes,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        while True:
            try:
                self._producer.produce(
                    topic=topic,
                    key=key,
                    value=value,
                    headers=list((headers or {}).items()),
                    on_delivery=_on_delivery,
                )
                break
            except BufferError:
                self._producer.poll(0.05)
        self._producer.poll(0)

    def flush(self, timeout: float = 15.0) -> None:
        remaining = self._producer.flush(timeout)
        if remaining:
            logger.warning("FLUSH_INCOMPLETE | pending=%d", remaining)
