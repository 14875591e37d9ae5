"""Domain models – plain frozen dataclasses, no storage concerns."""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple


@dataclass(frozen=True)
class Product:
    id: str
    sku: str
    name: str
    price: Decimal
    quantity: int
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewProduct:
    """Fields supplied on insert; the store generates id and timestamps."""

    name: str
    sku: str
    price: Decimal
    quantity: int
    created_by: Optional[str] = None


@dataclass(frozen=True)
class StockPatch:
    """Fields written by a conditional quantity update.

    price=None leaves the stored price untouched.
    """

    quantity: int
    updated_at: datetime
    price: Optional[Decimal] = None


@dataclass(frozen=True)
class StockChange:
    """A committed quantity mutation, as reported to change listeners."""

    change_type: str
    product: Product
    previous_qty: int
    quantity_delta: int
    actor_id: Optional[str] = None


@dataclass(frozen=True)
class ProductPage:
    items: Tuple[Product, ...]
    page: int
    page_size: int
    total: int

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total / self.page_size))


@dataclass(frozen=True)
class Salesperson:
    email: str
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Session:
    """Who is calling. Passed into every gated call; never held globally."""

    user_id: str
    email: Optional[str] = None

    @property
    def normalized_email(self) -> str:
        return (self.email or "").strip().lower()
