"""Kafka Schema Encoders – DIP adapters for SchemaEncoder.

Fallback to the embedded Avro schema when the registry has no subject.
"""
from __future__ import annotations

import logging
from typing import Any

from confluent_kafka.schema_registry import SchemaRegistryClient
from confluent_kafka.schema_registry.avro import AvroSerializer
from confluent_kafka.schema_registry.error import SchemaRegistryError
from confluent_kafka.serialization import MessageField, SerializationContext

from duka.ports.schema_encoder import SchemaEncoder

logger = logging.getLogger(__name__)

STOCK_CHANGE_SCHEMA = (
    '{"type":"record","name":"StockChange","namespace":"duka","fields":['
    '{"name":"change_id","type":"string"},'
    '{"name":"product_id","type":"string"},'
    '{"name":"sku","type":"string"},'
    '{"name":"change_type","type":{"type":"enum","name":"ChangeType","symbols":["SALE","RESTOCK","NEW_PRODUCT"]}},'
    '{"name":"quantity_delta","type":"int"},'
    '{"name":"previous_qty","type":"int"},'
    '{"name":"new_qty","type":"int"},'
    '{"name":"price","type":"double"},'
    '{"name":"actor_id","type":["null","string"],"default":null},'
    '{"name":"ts","type":{"type":"long","logicalType":"timestamp-millis"}}]}'
)


class AvroSchemaEncoder(SchemaEncoder):
    """SRP: encode dicts to Avro bytes for a topic."""

    def __init__(self, sr: SchemaRegistryClient, subject: str, embedded_schema: str) -> None:
        try:
            meta = sr.get_latest_version(subject)
            schema_str = meta.schema.schema_str
        except SchemaRegistryError:
            logger.info("SCHEMA_EMBEDDED | subject=%s", subject)
            schema_str = embedded_schema
        self._serializer = AvroSerializer(sr, schema_str)
        self._subject = subject

    def encode(self, topic: str, value: Any) -> bytes:
        return self._serializer(value, SerializationContext(topic, MessageField.VALUE))
