"""duka – stock desk for small shops.

Command line over the stock services:
- sell / refill run the optimistic stock reconciliation (compare-and-set on
  quantity, no in-process retry; a Conflict exits non-zero so the caller
  can decide to run it again)
- products lists the catalog, newest first, for admins
- salespersons manages the allowlist that decides who is a salesperson

SRP: this module only wires and runs the app; logic lives in services.
DIP: relies on ports and adapters, not concrete libs.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional, Sequence

from duka.adapters.kafka.factory import build_kafka
from duka.adapters.memory import MemoryProductStore, MemorySalespersonStore
from duka.adapters.postgres.repositories import PgProductStore, PgSalespersonStore, pg_connect
from duka.adapters.postgres.schema import ensure_schema
from duka.config import Config
from duka.domain.enums import EVENTS_BACKENDS, STORE_BACKENDS
from duka.domain.errors import StockError
from duka.domain.models import Product, Session
from duka.domain.policies import InputPolicy
from duka.services.access import AccessPolicy
from duka.services.catalog import CatalogService
from duka.services.desk import SalesDesk
from duka.services.events import StockEventEmitter
from duka.services.reconciler import StockReconciler
from duka.services.salespersons import SalespersonService

logger = logging.getLogger("duka")

EXIT_CODES = {
    "invalid_argument": 2,
    "not_found": 3,
    "insufficient_stock": 4,
    "conflict": 5,
    "not_authorized": 6,
}


class App:
    """SRP: orchestrate lifecycle. No business logic here."""

    def __init__(self, cfg: Config) -> None:
        if cfg.store_backend not in STORE_BACKENDS:
            raise ValueError(f"Unknown STORE_BACKEND: {cfg.store_backend!r}")
        if cfg.events_backend not in EVENTS_BACKENDS:
            raise ValueError(f"Unknown EVENTS_BACKEND: {cfg.events_backend!r}")
        self.cfg = cfg
        self.conn = None
        self.publisher = None

    def setup(self) -> None:
        if self.cfg.store_backend == "postgres":
            self.conn = pg_connect(self.cfg)
            products, salespersons = PgProductStore(self.conn), PgSalespersonStore(self.conn)
        else:
            logger.warning("STORE_BACKEND=memory | data lives only for this process")
            products, salespersons = MemoryProductStore(), MemorySalespersonStore()

        listeners = []
        if self.cfg.events_backend == "kafka":
            self.publisher, encoder = build_kafka(self.cfg)
            listeners.append(StockEventEmitter(self.cfg.topic_stock_changes, self.publisher, encoder))

        self.access = AccessPolicy(salespersons)
        reconciler = StockReconciler(
            products, policy=InputPolicy(self.cfg.validation_mode), listeners=listeners
        )
        self.desk = SalesDesk(reconciler, self.access)
        self.catalog = CatalogService(products, self.access, page_size=self.cfg.page_size)
        self.salespersons = SalespersonService(salespersons, self.access)

    def teardown(self) -> None:
        try:
            if self.publisher is not None:
                self.publisher.flush(15)
        finally:
            if self.conn is not None:
                self.conn.close()

    def init_db(self) -> None:
        if self.conn is None:
            print("memory backend: nothing to initialise")
            return
        ensure_schema(self.conn)


def format_product(p: Product) -> str:
    updated = p.updated_at.isoformat() if p.updated_at else "—"
    return (
        f"id={p.id} sku={p.sku} name={p.name!r} price={p.price} "
        f"quantity={p.quantity} updated_at={updated}"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="duka", description="Stock desk for small shops")
    parser.add_argument("--user-id", default=os.getenv("DUKA_USER_ID", ""))
    parser.add_argument("--email", default=os.getenv("DUKA_USER_EMAIL", ""))
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="create tables")
    sub.add_parser("whoami", help="print the caller's role")

    sell = sub.add_parser("sell", help="record a sale")
    sell.add_argument("product_id")
    sell.add_argument("quantity", type=int)

    refill = sub.add_parser("refill", help="add a product or restock an existing sku (admin)")
    refill.add_argument("sku")
    refill.add_argument("name")
    refill.add_argument("price")
    refill.add_argument("quantity")

    products = sub.add_parser("products", help="list products, newest first (admin)")
    products.add_argument("--page", type=int, default=1)

    sp = sub.add_parser("salespersons", help="manage the salesperson allowlist (admin)")
    sp_sub = sp.add_subparsers(dest="action", required=True)
    sp_sub.add_parser("list")
    sp_sub.add_parser("add").add_argument("email")
    sp_sub.add_parser("remove").add_argument("email")
    return parser


def dispatch(app: App, args: argparse.Namespace) -> List[str]:
    session = Session(user_id=args.user_id, email=args.email or None)
    if args.command == "init-db":
        app.init_db()
        return ["schema ready"]
    if args.command == "whoami":
        return [app.desk.whoami(session).value]
    if args.command == "sell":
        return [format_product(app.desk.sell(session, args.product_id, args.quantity))]
    if args.command == "refill":
        return [format_product(app.desk.refill(session, args.sku, args.name, args.price, args.quantity))]
    if args.command == "products":
        page = app.catalog.page(session, args.page)
        lines = [format_product(p) for p in page.items]
        lines.append(f"page {page.page}/{page.total_pages} ({page.total} products)")
        return lines
    if args.action == "list":
        return [f"{r.email} {r.created_at.isoformat() if r.created_at else ''}".rstrip()
                for r in app.salespersons.list(session)]
    if args.action == "add":
        return [f"added {app.salespersons.add(session, args.email).email}"]
    app.salespersons.remove(session, args.email)
    return [f"removed {args.email.strip().lower()}"]


def main(argv: Optional[Sequence[str]] = None, cfg: Optional[Config] = None) -> int:
    cfg = cfg or Config()
    logging.basicConfig(
        level=logging.getLevelName(cfg.log_level.upper()),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    args = build_parser().parse_args(argv)
    app = App(cfg)
    try:
        app.setup()
        for line in dispatch(app, args):
            print(line)
    except StockError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_CODES.get(exc.kind, 1)
    finally:
        app.teardown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
