"""Access Policy – SRP: decide who may do what.

An authenticated user whose email is on the salesperson allowlist is a
salesperson; any other authenticated user is an admin.
"""
from __future__ import annotations

import logging

from duka.domain.enums import Role
from duka.domain.errors import NotAuthorized, StoreError
from duka.domain.models import Session
from duka.ports.repositories import SalespersonStore

logger = logging.getLogger(__name__)


class AccessPolicy:
    def __init__(self, salespersons: SalespersonStore) -> None:
        self.salespersons = salespersons

    def resolve_role(self, session: Session) -> Role:
        email = session.normalized_email
        if not session.user_id or not email:
            raise NotAuthorized("Not authenticated.")
        try:
            member = self.salespersons.find_by_email(email)
        except StoreError:
            logger.warning("MEMBERSHIP_LOOKUP_FAILED | email=%s | treating as non-salesperson", email)
            member = None
        return Role.SALESPERSON if member is not None else Role.ADMIN

    def require_admin(self, session: Session) -> None:
        if self.resolve_role(session) is not Role.ADMIN:
            raise NotAuthorized("Not authorized.")
