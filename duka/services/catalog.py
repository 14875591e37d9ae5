"""Catalog Service – SRP: paged product listing for admins."""
from __future__ import annotations

from duka.domain.errors import InvalidArgument
from duka.domain.models import ProductPage, Session
from duka.ports.repositories import ProductStore
from duka.services.access import AccessPolicy


class CatalogService:
    def __init__(self, store: ProductStore, access: AccessPolicy, page_size: int = 10) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self.store = store
        self.access = access
        self.page_size = page_size

    def page(self, session: Session, page: int = 1) -> ProductPage:
        """Newest products first; pages are 1-based."""
        if isinstance(page, bool) or not isinstance(page, int) or page < 1:
            raise InvalidArgument(f"page must be a positive integer, got {page!r}")
        self.access.require_admin(session)
        offset = (page - 1) * self.page_size
        rows, total = self.store.list_products(offset, self.page_size)
        return ProductPage(items=tuple(rows), page=page, page_size=self.page_size, total=total)
