"""Common Utilities – SRP: IDs and time.

ISP: tiny helpers the services share.
"""
from __future__ import annotations

import random
import string
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_ms(ts: datetime) -> int:
    return int(ts.timestamp() * 1000)


def now_ms() -> int:
    return to_ms(utc_now())


def rid(prefix: str, n: int = 10) -> str:
    return prefix + "_" + "".join(random.choices(string.ascii_lowercase + string.digits, k=n))
