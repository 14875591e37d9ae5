"""SRP: one place to parse and hold configuration.

Keep it simple; no side effects beyond reading environment.
"""
from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Config:
    """DIP: business consumes Config, not raw env."""

    # Store
    store_backend: str = os.getenv("STORE_BACKEND", "postgres")  # "postgres" | "memory"
    pg_dsn: str = os.getenv(
        "PG_DSN", "host=localhost port=5432 dbname=duka user=duka password=duka"
    )
    pg_connect_timeout_s: int = int(os.getenv("PG_CONNECT_TIMEOUT_S", "10"))
    pg_wait_s: int = int(os.getenv("PG_WAIT_S", "0"))

    # Input handling for refill price/quantity
    validation_mode: str = os.getenv("VALIDATION_MODE", "lenient")  # "lenient" | "strict"

    # Catalog
    page_size: int = int(os.getenv("PAGE_SIZE", "10"))

    # Stock-change events
    events_backend: str = os.getenv("EVENTS_BACKEND", "none")  # "none" | "kafka"
    bootstrap: str = os.getenv("KAFKA_BOOTSTRAP", "kafka:9092")
    schema_registry: str = os.getenv("SCHEMA_REGISTRY_URL", "http://schema-registry:8081")
    topic_stock_changes: str = os.getenv("TOPIC_STOCK_CHANGES", "stock-changes.v1")

    log_level: str = os.getenv("LOG_LEVEL", "INFO")
