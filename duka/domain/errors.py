"""Errors – SRP: one taxonomy for every failure the services surface.

Each class carries a stable ``kind`` so callers can branch on the class
or on the string (CLI exit codes, logs).
"""
from __future__ import annotations

from typing import Optional


class StockError(Exception):
    kind = "stock_error"


class InvalidArgument(StockError):
    """Bad input; raised before any store access."""

    kind = "invalid_argument"


class NotFound(StockError):
    kind = "not_found"


class InsufficientStock(StockError):
    kind = "insufficient_stock"

    def __init__(self, product_id: str, requested: int, available: int) -> None:
        super().__init__(
            f"Insufficient stock for {product_id}: requested={requested}, available={available}"
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class Conflict(StockError):
    """Lost the optimistic race. Re-run the whole read-modify-write to retry."""

    kind = "conflict"

    def __init__(self, product_id: str, expected_quantity: int, message: Optional[str] = None) -> None:
        super().__init__(
            message
            or f"Stock changed concurrently for {product_id} (expected quantity {expected_quantity}). Please retry."
        )
        self.product_id = product_id
        self.expected_quantity = expected_quantity


class DuplicateKey(StockError):
    kind = "duplicate_key"

    def __init__(self, field: str, value: Optional[str] = None) -> None:
        super().__init__(f"Duplicate {field}" + (f": {value}" if value else ""))
        self.field = field
        self.value = value


class StoreError(StockError):
    kind = "store_error"


class NotAuthorized(StockError):
    kind = "not_authorized"
