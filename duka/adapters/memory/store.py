"""In-memory Adapters – DIP implementations for local runs and tests.

Each public method holds the lock for its whole body, so every
primitive is atomic like a single-row statement in Postgres. No lock
is held between calls.
"""
from __future__ import annotations

import itertools
import threading
import uuid
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from duka.domain.errors import DuplicateKey, StoreError
from duka.domain.models import NewProduct, Product, Salesperson, StockPatch
from duka.ports.repositories import ProductStore, SalespersonStore
from duka.services.common import utc_now


class MemoryProductStore(ProductStore):
    def __init__(self, clock: Callable = utc_now) -> None:
        self._lock = threading.Lock()
        self._rows: Dict[str, Product] = {}
        self._by_sku: Dict[str, str] = {}
        self._seq: Dict[str, int] = {}
        self._counter = itertools.count()
        self._clock = clock

    def read_product(self, product_id: str) -> Optional[Product]:
        with self._lock:
            return self._rows.get(product_id)

    def read_product_by_sku(self, sku: str) -> Optional[Product]:
        with self._lock:
            pid = self._by_sku.get(sku)
            return self._rows.get(pid) if pid else None

    def insert_product(self, fields: NewProduct) -> Product:
        if fields.quantity < 0:
            raise StoreError('new row for relation "products" violates check constraint "products_quantity_check"')
        with self._lock:
            if fields.sku in self._by_sku:
                raise DuplicateKey("sku", fields.sku)
            now = self._clock()
            product = Product(
                id=str(uuid.uuid4()),
                sku=fields.sku,
                name=fields.name,
                price=fields.price,
                quantity=fields.quantity,
                created_by=fields.created_by,
                created_at=now,
                updated_at=now,
            )
            self._rows[product.id] = product
            self._by_sku[product.sku] = product.id
            self._seq[product.id] = next(self._counter)
            return product

    def cas_update_quantity(
        self, product_id: str, expected_quantity: int, patch: StockPatch
    ) -> Optional[Product]:
        if patch.quantity < 0:
            raise StoreError('new row for relation "products" violates check constraint "products_quantity_check"')
        with self._lock:
            current = self._rows.get(product_id)
            if current is None or current.quantity != expected_quantity:
                return None
            updated = replace(
                current,
                quantity=patch.quantity,
                updated_at=patch.updated_at,
                price=current.price if patch.price is None else patch.price,
            )
            self._rows[product_id] = updated
            return updated

    def list_products(self, offset: int, limit: int) -> Tuple[Sequence[Product], int]:
        with self._lock:
            rows = sorted(
                self._rows.values(),
                key=lambda p: (p.created_at, self._seq[p.id]),
                reverse=True,
            )
        return rows[offset:offset + limit], len(rows)


class MemorySalespersonStore(SalespersonStore):
    def __init__(self, clock: Callable = utc_now) -> None:
        self._lock = threading.Lock()
        self._rows: Dict[str, Salesperson] = {}
        self._seq: Dict[str, int] = {}
        self._counter = itertools.count()
        self._clock = clock

    def find_by_email(self, email: str) -> Optional[Salesperson]:
        with self._lock:
            return self._rows.get(email)

    def list_created_by(self, user_id: str) -> List[Salesperson]:
        with self._lock:
            rows = [r for r in self._rows.values() if r.created_by == user_id]
            rows.sort(key=lambda r: (r.created_at, self._seq[r.email]), reverse=True)
        return rows

    def upsert(self, email: str, created_by: str) -> Salesperson:
        with self._lock:
            existing = self._rows.get(email)
            if existing is not None:
                row = replace(existing, created_by=created_by)
            else:
                row = Salesperson(email=email, created_by=created_by, created_at=self._clock())
                self._seq[email] = next(self._counter)
            self._rows[email] = row
            return row

    def delete(self, email: str) -> bool:
        with self._lock:
            self._seq.pop(email, None)
            return self._rows.pop(email, None) is not None
