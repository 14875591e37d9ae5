"""Enums – SRP: centralize constant lists used across services."""
from __future__ import annotations

import enum

VALIDATION_MODES = ["lenient", "strict"]
STORE_BACKENDS = ["postgres", "memory"]
EVENTS_BACKENDS = ["none", "kafka"]


class Role(str, enum.Enum):
    ADMIN = "admin"
    SALESPERSON = "salesperson"
