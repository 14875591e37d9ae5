"""Sales Desk – SRP: role-gated entry points over the reconciler.

The reconciler stays unaware of users; the desk checks the caller's
role and stamps who made the change.
"""
from __future__ import annotations

from typing import Any

from duka.domain.enums import Role
from duka.domain.models import Product, Session
from duka.services.access import AccessPolicy
from duka.services.reconciler import StockReconciler


class SalesDesk:
    def __init__(self, reconciler: StockReconciler, access: AccessPolicy) -> None:
        self.reconciler = reconciler
        self.access = access

    def whoami(self, session: Session) -> Role:
        return self.access.resolve_role(session)

    def sell(self, session: Session, product_id: str, quantity: int) -> Product:
        self.access.resolve_role(session)
        return self.reconciler.sell(product_id, quantity, actor_id=session.user_id)

    def refill(self, session: Session, sku: str, name: str, price: Any, quantity: Any) -> Product:
        self.access.require_admin(session)
        return self.reconciler.refill(sku, name, price, quantity, created_by=session.user_id)
