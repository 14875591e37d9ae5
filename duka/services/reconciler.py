"""Stock Reconciler – SRP: apply quantity changes with optimistic concurrency.

DIP: depends on the ProductStore port only.

Every write is a compare-and-set on the quantity the caller just read.
Nothing here retries: a lost race is raised as Conflict and the caller
decides whether to run the whole read-modify-write again.
"""
from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional, Tuple

from duka.domain.errors import (
    Conflict,
    DuplicateKey,
    InsufficientStock,
    InvalidArgument,
    NotFound,
    StoreError,
)
from duka.domain.models import NewProduct, Product, StockChange, StockPatch
from duka.domain.policies import InputPolicy, require_positive_int
from duka.ports.repositories import ProductStore
from duka.services.common import utc_now

logger = logging.getLogger(__name__)

ChangeListener = Callable[[StockChange], None]


class StockReconciler:
    def __init__(
        self,
        store: ProductStore,
        policy: Optional[InputPolicy] = None,
        clock: Callable[[], datetime] = utc_now,
        listeners: Iterable[ChangeListener] = (),
    ) -> None:
        self.store = store
        self.policy = policy or InputPolicy()
        self.clock = clock
        self.listeners: Tuple[ChangeListener, ...] = tuple(listeners)

    def sell(self, product_id: str, quantity: int, *, actor_id: Optional[str] = None) -> Product:
        """Decrement stock; returns the row as stored after the write."""
        if not isinstance(product_id, str) or not product_id.strip():
            raise InvalidArgument("product_id must be a non-empty string")
        require_positive_int(quantity)

        current = self.store.read_product(product_id)
        if current is None:
            raise NotFound(f"Product not found: {product_id}")
        if current.quantity < quantity:
            logger.info(
                "SELL_REJECTED | product_id=%s | requested=%d | available=%d",
                product_id, quantity, current.quantity,
            )
            raise InsufficientStock(product_id, quantity, current.quantity)

        patch = StockPatch(quantity=current.quantity - quantity, updated_at=self.clock())
        updated = self.store.cas_update_quantity(current.id, current.quantity, patch)
        if updated is None:
            logger.warning(
                "SELL_CONFLICT | product_id=%s | expected_qty=%d", product_id, current.quantity
            )
            raise Conflict(
                product_id,
                current.quantity,
                "Stock changed while selling. Please retry.",
            )

        logger.info(
            "SELL_COMMITTED | product_id=%s | qty=%d | new_qty=%d",
            updated.id, quantity, updated.quantity,
        )
        self._notify(StockChange("SALE", updated, current.quantity, -quantity, actor_id))
        return updated

    def refill(
        self,
        sku: str,
        name: str,
        price: Any,
        quantity: Any,
        *,
        created_by: Optional[str] = None,
    ) -> Product:
        """Create the product for a new sku, or restock the existing one."""
        sku = (sku or "").strip()
        name = (name or "").strip()
        if not sku or not name:
            raise InvalidArgument("Provide name, SKU, and positive quantity.")
        qty = self.policy.coerce_quantity(quantity)
        amount = self.policy.coerce_price(price)

        try:
            inserted = self.store.insert_product(
                NewProduct(name=name, sku=sku, price=amount, quantity=qty, created_by=created_by)
            )
        except DuplicateKey as exc:
            if exc.field != "sku":
                raise StoreError(str(exc)) from exc
            return self._restock(sku, amount, qty, created_by)

        logger.info("REFILL_CREATED | sku=%s | product_id=%s | qty=%d", sku, inserted.id, qty)
        self._notify(StockChange("NEW_PRODUCT", inserted, 0, qty, created_by))
        return inserted

    def _restock(self, sku: str, price: Decimal, qty: int, actor_id: Optional[str]) -> Product:
        existing = self.store.read_product_by_sku(sku)
        if existing is None:
            raise NotFound(f"Failed to load existing product for sku {sku}")

        patch = StockPatch(
            quantity=existing.quantity + qty,
            updated_at=self.clock(),
            price=price if price > 0 else existing.price,
        )
        updated = self.store.cas_update_quantity(existing.id, existing.quantity, patch)
        if updated is None:
            logger.warning(
                "REFILL_CONFLICT | sku=%s | product_id=%s | expected_qty=%d",
                sku, existing.id, existing.quantity,
            )
            raise Conflict(
                existing.id,
                existing.quantity,
                "Stock changed while refilling. Please retry.",
            )

        logger.info(
            "REFILL_MERGED | sku=%s | product_id=%s | qty=%d | new_qty=%d",
            sku, updated.id, qty, updated.quantity,
        )
        self._notify(StockChange("RESTOCK", updated, existing.quantity, qty, actor_id))
        return updated

    def _notify(self, change: StockChange) -> None:
        for listener in self.listeners:
            listener(change)
