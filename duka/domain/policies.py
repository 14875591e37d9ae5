"""Policies – OCP: swap input handling without changing the reconciler.

InputPolicy decides how refill price/quantity input is coerced:
"lenient" defaults bad numbers the way the shop front always has,
"strict" rejects them.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from duka.domain.enums import VALIDATION_MODES
from duka.domain.errors import InvalidArgument

_INT_RE = re.compile(r"^[+-]?\d+$")
ZERO = Decimal("0")


def _is_plain_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def require_positive_int(value: Any, what: str = "quantity") -> int:
    """Mode-independent check used by sell."""
    if not _is_plain_int(value) or value <= 0:
        raise InvalidArgument(f"{what} must be a positive integer, got {value!r}")
    return value


@dataclass(frozen=True)
class InputPolicy:
    mode: str = "lenient"  # "lenient" | "strict"

    def __post_init__(self) -> None:
        if self.mode not in VALIDATION_MODES:
            raise ValueError(f"Unknown validation mode: {self.mode!r}")

    @property
    def strict(self) -> bool:
        return self.mode == "strict"

    def coerce_price(self, value: Any) -> Decimal:
        price = None
        if not isinstance(value, bool) and value is not None:
            try:
                price = Decimal(str(value).strip())
            except (InvalidOperation, ValueError):
                price = None
        if price is None or not price.is_finite():
            if self.strict:
                raise InvalidArgument(f"price must be a finite number, got {value!r}")
            return ZERO
        if price < 0:
            if self.strict:
                raise InvalidArgument(f"price must be non-negative, got {value!r}")
            return ZERO
        return price

    def coerce_quantity(self, value: Any) -> int:
        if self.strict:
            qty = self._strict_int(value)
        else:
            qty = self._lenient_int(value)
        if qty <= 0:
            raise InvalidArgument("Provide name, SKU, and positive quantity.")
        return qty

    @staticmethod
    def _strict_int(value: Any) -> int:
        if _is_plain_int(value):
            return value
        if isinstance(value, str) and _INT_RE.match(value.strip()):
            return int(value.strip())
        raise InvalidArgument(f"quantity must be an integer, got {value!r}")

    @staticmethod
    def _lenient_int(value: Any) -> int:
        if isinstance(value, bool) or value is None:
            return 0
        try:
            number = float(value)
        except (TypeError, ValueError):
            return 0
        if not math.isfinite(number):
            return 0
        return max(0, math.floor(number))
