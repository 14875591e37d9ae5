from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from duka.adapters.memory import MemoryProductStore, MemorySalespersonStore
from duka.domain.models import Session
from duka.services.access import AccessPolicy
from duka.services.reconciler import StockReconciler

EPOCH = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


class TickingClock:
    """Deterministic clock: every call is one second after the previous."""

    def __init__(self) -> None:
        self._ticks = itertools.count()

    def __call__(self) -> datetime:
        return EPOCH + timedelta(seconds=next(self._ticks))


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def product_store(clock):
    return MemoryProductStore(clock=clock)


@pytest.fixture
def salesperson_store(clock):
    return MemorySalespersonStore(clock=clock)


@pytest.fixture
def reconciler(product_store, clock):
    return StockReconciler(product_store, clock=clock)


@pytest.fixture
def access(salesperson_store):
    return AccessPolicy(salesperson_store)


@pytest.fixture
def admin():
    return Session(user_id="u-admin", email="Owner@Duka.co.ke")


@pytest.fixture
def seller(salesperson_store, admin):
    salesperson_store.upsert("wanjiku@duka.co.ke", admin.user_id)
    return Session(user_id="u-seller", email="wanjiku@duka.co.ke")
