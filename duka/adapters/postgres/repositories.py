"""Postgres Adapters – DIP implementations for repositories.

SRP: keep SQL isolated here. Services see only ports.

The connection runs in autocommit, so every statement is its own
transaction; the conditional UPDATE re-checks its WHERE clause against
the latest row version, which is what makes it a compare-and-set.
"""
from __future__ import annotations

import logging
from time import monotonic, sleep
from typing import List, Optional, Sequence, Tuple

import psycopg2
from psycopg2 import errorcodes, errors

from duka.config import Config
from duka.domain.errors import DuplicateKey, StoreError
from duka.domain.models import NewProduct, Product, Salesperson, StockPatch
from duka.ports.repositories import ProductStore, SalespersonStore

logger = logging.getLogger(__name__)

PRODUCT_COLUMNS = "id, sku, name, price, quantity, created_by, created_at, updated_at"
SALESPERSON_COLUMNS = "email, created_by, created_at"


def pg_connect(config: Config):
    """Connect, retrying for up to config.pg_wait_s seconds."""
    start = monotonic()
    while True:
        try:
            conn = psycopg2.connect(config.pg_dsn, connect_timeout=config.pg_connect_timeout_s)
            break
        except psycopg2.OperationalError as exc:
            if monotonic() - start >= config.pg_wait_s:
                raise StoreError(f"Could not connect to Postgres: {exc}") from exc
            sleep(1)
    conn.autocommit = True
    return conn


def is_unique_violation(exc: Exception) -> bool:
    return (
        getattr(exc, "pgcode", None) == errorcodes.UNIQUE_VIOLATION
        or "duplicate key" in str(exc).lower()
    )


def _constraint_name(exc: Exception) -> Optional[str]:
    diag = getattr(exc, "diag", None)
    return getattr(diag, "constraint_name", None)


def _row_to_product(row) -> Product:
    pid, sku, name, price, quantity, created_by, created_at, updated_at = row
    return Product(
        id=str(pid),
        sku=sku,
        name=name,
        price=price,
        quantity=int(quantity),
        created_by=str(created_by) if created_by is not None else None,
        created_at=created_at,
        updated_at=updated_at,
    )


def _row_to_salesperson(row) -> Salesperson:
    email, created_by, created_at = row
    return Salesperson(
        email=email,
        created_by=str(created_by) if created_by is not None else None,
        created_at=created_at,
    )


class PgProductStore(ProductStore):
    def __init__(self, conn) -> None:
        self.conn = conn

    def _fetchone(self, sql: str, params: tuple):
        try:
            with self.conn.cursor() as cur:
                cur.execute(sql, params)
                return cur.fetchone()
        except errors.InvalidTextRepresentation:
            # malformed uuid literal: no such row
            return None
        except psycopg2.Error as exc:
            logger.exception("PG_QUERY_FAILED | sql=%s", sql.split()[0])
            raise StoreError(str(exc).strip()) from exc

    def read_product(self, product_id: str) -> Optional[Product]:
        row = self._fetchone(f"SELECT {PRODUCT_COLUMNS} FROM products WHERE id = %s", (product_id,))
        return _row_to_product(row) if row else None

    def read_product_by_sku(self, sku: str) -> Optional[Product]:
        row = self._fetchone(f"SELECT {PRODUCT_COLUMNS} FROM products WHERE sku = %s", (sku,))
        return _row_to_product(row) if row else None

    def insert_product(self, fields: NewProduct) -> Product:
        try:
            with self.conn.cursor() as cur:
                cur.execute(
                    f"""
                    INSERT INTO products (name, sku, price, quantity, created_by)
                    VALUES (%s, %s, %s, %s, %s)
                    RETURNING {PRODUCT_COLUMNS}
                    """,
                    (fields.name, fields.sku, fields.price, fields.quantity, fields.created_by),
                )
                row = cur.fetchone()
        except psycopg2.Error as exc:
            if is_unique_violation(exc):
                constraint = _constraint_name(exc)
                if constraint is None or "sku" in constraint:
                    raise DuplicateKey("sku", fields.sku) from exc
            logger.exception("PG_INSERT_FAILED | sku=%s", fields.sku)
            raise StoreError(str(exc).strip()) from exc
        return _row_to_product(row)

    def cas_update_quantity(
        self, product_id: str, expected_quantity: int, patch: StockPatch
    ) -> Optional[Product]:
        row = self._fetchone(
            f"""
            UPDATE products
            SET quantity = %s, updated_at = %s, price = COALESCE(%s, price)
            WHERE id = %s AND quantity = %s
            RETURNING {PRODUCT_COLUMNS}
            """,
            (patch.quantity, patch.updated_at, patch.price, product_id, expected_quantity),
        )
        return _row_to_product(row) if row else None

    def list_products(self, offset: int, limit: int) -> Tuple[Sequence[Product], int]:
        try:
            with self.conn.cursor() as cur:
                cur.execute("SELECT count(*) FROM products")
                (total,) = cur.fetchone()
                cur.execute(
                    f"SELECT {PRODUCT_COLUMNS} FROM products ORDER BY created_at DESC LIMIT %s OFFSET %s",
                    (limit, offset),
                )
                rows = [_row_to_product(r) for r in cur.fetchall()]
        except psycopg2.Error as exc:
            logger.exception("PG_QUERY_FAILED | sql=list_products")
            raise StoreError(str(exc).strip()) from exc
        return rows, int(total)


class PgSalespersonStore(SalespersonStore):
    def __init__(self, conn) -> None:
        self.conn = conn

    def _run(self, sql: str, params: tuple):
        try:
            with self.conn.cursor() as cur:
                cur.execute(sql, params)
                return cur.fetchall()
        except psycopg2.Error as exc:
            logger.exception("PG_QUERY_FAILED | sql=%s", sql.split()[0])
            raise StoreError(str(exc).strip()) from exc

    def find_by_email(self, email: str) -> Optional[Salesperson]:
        rows = self._run(f"SELECT {SALESPERSON_COLUMNS} FROM salespersons WHERE email = %s", (email,))
        return _row_to_salesperson(rows[0]) if rows else None

    def list_created_by(self, user_id: str) -> List[Salesperson]:
        rows = self._run(
            f"SELECT {SALESPERSON_COLUMNS} FROM salespersons WHERE created_by = %s ORDER BY created_at DESC",
            (user_id,),
        )
        return [_row_to_salesperson(r) for r in rows]

    def upsert(self, email: str, created_by: str) -> Salesperson:
        rows = self._run(
            f"""
            INSERT INTO salespersons (email, created_by)
            VALUES (%s, %s)
            ON CONFLICT (email)
            DO UPDATE SET created_by = EXCLUDED.created_by
            RETURNING {SALESPERSON_COLUMNS}
            """,
            (email, created_by),
        )
        return _row_to_salesperson(rows[0])

    def delete(self, email: str) -> bool:
        rows = self._run("DELETE FROM salespersons WHERE email = %s RETURNING email", (email,))
        return bool(rows)
