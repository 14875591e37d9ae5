"""Stock Events – SRP: turn committed stock changes into published records.

DIP: depends on encoder and publisher ports. Registered as a reconciler
listener, so it only ever sees changes the store already committed.
"""
from __future__ import annotations

import logging

from duka.domain.models import StockChange
from duka.ports.event_publisher import EventPublisher
from duka.ports.schema_encoder import SchemaEncoder
from duka.services.common import now_ms, rid, to_ms

logger = logging.getLogger(__name__)


class StockEventEmitter:
    def __init__(self, topic: str, publisher: EventPublisher, encoder: SchemaEncoder) -> None:
        self.topic = topic
        self.publisher = publisher
        self.encoder = encoder

    def to_record(self, change: StockChange) -> dict:
        product = change.product
        return {
            "change_id": rid("chg"),
            "product_id": product.id,
            "sku": product.sku,
            "change_type": change.change_type,
            "quantity_delta": change.quantity_delta,
            "previous_qty": change.previous_qty,
            "new_qty": product.quantity,
            "price": float(product.price),
            "actor_id": change.actor_id,
            "ts": to_ms(product.updated_at) if product.updated_at else now_ms(),
        }

    def __call__(self, change: StockChange) -> None:
        record = self.to_record(change)
        try:
            payload = self.encoder.encode(self.topic, record)
            self.publisher.publish(
                self.topic,
                key=record["product_id"],
                value=payload,
                headers={"entity": "stock_change", "source": "duka"},
            )
        except Exception:
            # the stock change is already committed; a lost event must not undo that
            logger.exception(
                "EVENT_PUBLISH_FAILED | change_id=%s | product_id=%s",
                record["change_id"], record["product_id"],
            )
