"""Schema – SRP: create the tables the repositories expect.

Idempotent. The quantity CHECK is the last line of defence for the
non-negative stock invariant; the unique sku drives refill's merge path.
"""
from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

DDL = [
    """
    CREATE TABLE IF NOT EXISTS products (
        id          uuid PRIMARY KEY DEFAULT gen_random_uuid(),
        sku         text NOT NULL,
        name        text NOT NULL,
        price       numeric(12, 2) NOT NULL DEFAULT 0 CHECK (price >= 0),
        quantity    integer NOT NULL DEFAULT 0,
        created_by  text,
        created_at  timestamptz NOT NULL DEFAULT now(),
        updated_at  timestamptz DEFAULT now(),
        CONSTRAINT products_sku_key UNIQUE (sku),
        CONSTRAINT products_quantity_check CHECK (quantity >= 0)
    )
    """,
    "CREATE INDEX IF NOT EXISTS products_created_at_idx ON products (created_at DESC)",
    """
    CREATE TABLE IF NOT EXISTS salespersons (
        email       text PRIMARY KEY,
        created_by  text,
        created_at  timestamptz NOT NULL DEFAULT now()
    )
    """,
    "CREATE INDEX IF NOT EXISTS salespersons_created_by_idx ON salespersons (created_by)",
]


def ensure_schema(conn) -> None:
    with conn.cursor() as cur:
        for stmt in DDL:
            cur.execute(stmt)
    logger.info("SCHEMA_READY | tables=products,salespersons")
