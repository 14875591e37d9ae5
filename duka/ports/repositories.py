"""DIP Ports – repositories for product and salesperson rows.

SRP: define needs; implementations live under adapters/postgres and
adapters/memory. Each method is one store round-trip and must be atomic
at row granularity.
"""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from duka.domain.models import NewProduct, Product, Salesperson, StockPatch


class ProductStore:
    def read_product(self, product_id: str) -> Optional[Product]:
        raise NotImplementedError

    def read_product_by_sku(self, sku: str) -> Optional[Product]:
        raise NotImplementedError

    def insert_product(self, fields: NewProduct) -> Product:
        """Insert a row. Raises DuplicateKey(field="sku") if the sku exists."""
        raise NotImplementedError

    def cas_update_quantity(
        self, product_id: str, expected_quantity: int, patch: StockPatch
    ) -> Optional[Product]:
        """Apply patch only if the stored quantity equals expected_quantity.

        Returns the updated row, or None when no row matched.
        """
        raise NotImplementedError

    def list_products(self, offset: int, limit: int) -> Tuple[Sequence[Product], int]:  # (rows, total)
        raise NotImplementedError


class SalespersonStore:
    def find_by_email(self, email: str) -> Optional[Salesperson]:
        raise NotImplementedError

    def list_created_by(self, user_id: str) -> List[Salesperson]:
        raise NotImplementedError

    def upsert(self, email: str, created_by: str) -> Salesperson:
        raise NotImplementedError

    def delete(self, email: str) -> bool:
        raise NotImplementedError
