"""Salesperson Service – SRP: admin-managed allowlist of salesperson emails."""
from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import List

from duka.domain.errors import DuplicateKey, InvalidArgument, NotFound
from duka.domain.models import Salesperson, Session
from duka.ports.repositories import SalespersonStore
from duka.services.access import AccessPolicy

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class SalespersonService:
    def __init__(self, store: SalespersonStore, access: AccessPolicy) -> None:
        self.store = store
        self.access = access

    def list(self, session: Session) -> List[Salesperson]:
        self.access.require_admin(session)
        return [
            replace(row, email=row.email.lower())
            for row in self.store.list_created_by(session.user_id)
        ]

    def add(self, session: Session, email: str) -> Salesperson:
        address = normalize_email(email)
        if not EMAIL_RE.match(address):
            raise InvalidArgument("Enter a valid email.")
        if any(row.email == address for row in self.list(session)):
            raise DuplicateKey("email", address)
        row = self.store.upsert(address, session.user_id)
        logger.info("SALESPERSON_ADDED | email=%s | by=%s", address, session.user_id)
        return replace(row, email=row.email.lower())

    def remove(self, session: Session, email: str) -> None:
        self.access.require_admin(session)
        address = normalize_email(email)
        if not self.store.delete(address):
            raise NotFound(f"Salesperson not found: {address}")
        logger.info("SALESPERSON_REMOVED | email=%s | by=%s", address, session.user_id)
