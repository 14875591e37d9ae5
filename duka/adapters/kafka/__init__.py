"""Kafka adapters (confluent-kafka) for stock-change events."""
