"""Kafka Factory – SRP: build producer and encoder.

DIP: callers receive ports, not concrete libs.
"""
from __future__ import annotations

from typing import Tuple

from confluent_kafka import SerializingProducer
from confluent_kafka.schema_registry import SchemaRegistryClient
from confluent_kafka.serialization import StringSerializer

from duka.adapters.kafka.publisher import KafkaPublisher
from duka.adapters.kafka.serializers import STOCK_CHANGE_SCHEMA, AvroSchemaEncoder
from duka.config import Config


def build_kafka(config: Config) -> Tuple[KafkaPublisher, AvroSchemaEncoder]:
    sr_client = SchemaRegistryClient({"url": config.schema_registry})

    producer = SerializingProducer(
        {
            "bootstrap.servers": config.bootstrap,
            "enable.idempotence": True,
            "acks": "all",
            "linger.ms": 25,
            "compression.type": "lz4",
            "key.serializer": StringSerializer("utf_8"),
        }
    )
    encoder = AvroSchemaEncoder(
        sr_client, f"{config.topic_stock_changes}-value", STOCK_CHANGE_SCHEMA
    )
    return KafkaPublisher(producer), encoder
