"""Sell and refill behaviour against the in-memory store."""
from __future__ import annotations

from decimal import Decimal
from unittest import mock

import pytest

from duka.domain.errors import (
    Conflict,
    DuplicateKey,
    InsufficientStock,
    InvalidArgument,
    NotFound,
    StoreError,
)
from duka.domain.models import StockPatch
from duka.domain.policies import InputPolicy
from duka.services.reconciler import StockReconciler


def _stock(reconciler, sku="SKU1", qty=10, price=100):
    return reconciler.refill(sku, "Widget", price, qty, created_by="u-admin")


class TestSell:
    def test_successive_sales_reduce_quantity_by_total_sold(self, reconciler):
        product = _stock(reconciler, qty=10)

        reconciler.sell(product.id, 3)
        reconciler.sell(product.id, 4)
        final = reconciler.sell(product.id, 3)

        assert final.quantity == 0

    def test_returns_row_from_store(self, reconciler, product_store):
        product = _stock(reconciler, qty=5)

        sold = reconciler.sell(product.id, 2)

        assert sold == product_store.read_product(product.id)
        assert sold.updated_at > product.updated_at

    def test_oversell_is_rejected_and_leaves_quantity(self, reconciler, product_store):
        product = _stock(reconciler, qty=4)

        with pytest.raises(InsufficientStock) as info:
            reconciler.sell(product.id, 5)

        assert info.value.requested == 5
        assert info.value.available == 4
        assert info.value.kind == "insufficient_stock"
        assert product_store.read_product(product.id).quantity == 4

    def test_selling_exact_stock_reaches_zero(self, reconciler):
        product = _stock(reconciler, qty=2)
        assert reconciler.sell(product.id, 2).quantity == 0

    def test_unknown_product_is_not_found_without_write(self, product_store, clock):
        with mock.patch.object(product_store, "cas_update_quantity") as cas:
            with pytest.raises(NotFound):
                StockReconciler(product_store, clock=clock).sell("missing", 1)
        cas.assert_not_called()

    @pytest.mark.parametrize("qty", [0, -1, 1.5, True, "2", None])
    def test_bad_quantity_never_touches_store(self, qty):
        store = mock.Mock()
        with pytest.raises(InvalidArgument):
            StockReconciler(store).sell("p-1", qty)
        assert store.mock_calls == []

    @pytest.mark.parametrize("product_id", ["", "   ", None])
    def test_empty_product_id_never_touches_store(self, product_id):
        store = mock.Mock()
        with pytest.raises(InvalidArgument):
            StockReconciler(store).sell(product_id, 1)
        assert store.mock_calls == []

    def test_lost_race_raises_conflict(self, reconciler, product_store):
        product = _stock(reconciler, qty=10)
        with mock.patch.object(product_store, "cas_update_quantity", return_value=None):
            with pytest.raises(Conflict) as info:
                reconciler.sell(product.id, 1)
        assert info.value.expected_quantity == 10
        assert "retry" in str(info.value)

    def test_conflict_is_not_retried(self, reconciler, product_store):
        product = _stock(reconciler, qty=10)
        with mock.patch.object(product_store, "cas_update_quantity", return_value=None) as cas:
            with pytest.raises(Conflict):
                reconciler.sell(product.id, 1)
        assert cas.call_count == 1

    def test_cas_is_guarded_by_observed_quantity(self, product_store, clock):
        product_store.read_product = mock.Mock(return_value=mock.Mock(id="p-1", quantity=7))
        product_store.cas_update_quantity = mock.Mock(return_value=None)

        with pytest.raises(Conflict):
            StockReconciler(product_store, clock=clock).sell("p-1", 2)

        (pid, expected, patch), _ = product_store.cas_update_quantity.call_args
        assert (pid, expected) == ("p-1", 7)
        assert isinstance(patch, StockPatch)
        assert patch.quantity == 5
        assert patch.price is None


class TestRefill:
    def test_new_sku_creates_product(self, reconciler):
        product = reconciler.refill("SKU1", "Widget", 100, 5, created_by="u-admin")

        assert product.quantity == 5
        assert product.price == Decimal("100")
        assert product.created_by == "u-admin"
        assert product.id

    def test_existing_sku_increments_and_takes_new_price(self, reconciler):
        first = reconciler.refill("SKU1", "Widget", 100, 5)
        second = reconciler.refill("SKU1", "Widget", 120, 3)

        assert second.id == first.id
        assert second.quantity == 8
        assert second.price == Decimal("120")

    def test_zero_price_keeps_existing_price(self, reconciler):
        reconciler.refill("SKU1", "Widget", 100, 5)
        reconciler.refill("SKU1", "Widget", 120, 3)
        third = reconciler.refill("SKU1", "Widget", 0, 3)

        assert third.quantity == 11
        assert third.price == Decimal("120")

    def test_inputs_are_trimmed(self, reconciler, product_store):
        reconciler.refill("  SKU9 ", " Maize flour 2kg ", "250", 1)
        product = product_store.read_product_by_sku("SKU9")
        assert product.name == "Maize flour 2kg"

    @pytest.mark.parametrize(
        "sku,name,qty",
        [("", "Widget", 1), ("SKU1", "  ", 1), ("SKU1", "Widget", 0), ("SKU1", "Widget", -4)],
    )
    def test_invalid_input_never_touches_store(self, sku, name, qty):
        store = mock.Mock()
        with pytest.raises(InvalidArgument):
            StockReconciler(store).refill(sku, name, 10, qty)
        assert store.mock_calls == []

    def test_lenient_price_defaults_to_zero(self, reconciler):
        product = reconciler.refill("SKU1", "Widget", "not-a-number", 2)
        assert product.price == Decimal("0")

    def test_strict_policy_rejects_bad_price(self, product_store):
        strict = StockReconciler(product_store, policy=InputPolicy("strict"))
        with pytest.raises(InvalidArgument):
            strict.refill("SKU1", "Widget", "nan", 2)

    def test_merge_conflict_raises(self, reconciler, product_store):
        reconciler.refill("SKU1", "Widget", 100, 5)
        with mock.patch.object(product_store, "cas_update_quantity", return_value=None):
            with pytest.raises(Conflict) as info:
                reconciler.refill("SKU1", "Widget", 0, 1)
        assert info.value.expected_quantity == 5

    def test_duplicate_row_vanished_is_not_found(self, reconciler, product_store):
        reconciler.refill("SKU1", "Widget", 100, 5)
        with mock.patch.object(product_store, "read_product_by_sku", return_value=None):
            with pytest.raises(NotFound):
                reconciler.refill("SKU1", "Widget", 0, 1)

    def test_other_insert_failures_propagate_as_store_error(self):
        store = mock.Mock()
        store.insert_product.side_effect = StoreError("connection reset")
        with pytest.raises(StoreError, match="connection reset"):
            StockReconciler(store).refill("SKU1", "Widget", 1, 1)
        store.read_product_by_sku.assert_not_called()

    def test_duplicate_on_other_field_is_store_error(self):
        store = mock.Mock()
        store.insert_product.side_effect = DuplicateKey("id")
        with pytest.raises(StoreError):
            StockReconciler(store).refill("SKU1", "Widget", 1, 1)
        store.read_product_by_sku.assert_not_called()


class TestListeners:
    def test_changes_are_reported_after_commit(self, product_store, clock):
        seen = []
        reconciler = StockReconciler(product_store, clock=clock, listeners=[seen.append])

        created = reconciler.refill("SKU1", "Widget", 100, 5, created_by="u-admin")
        reconciler.refill("SKU1", "Widget", 0, 2, created_by="u-admin")
        reconciler.sell(created.id, 3, actor_id="u-seller")

        assert [c.change_type for c in seen] == ["NEW_PRODUCT", "RESTOCK", "SALE"]
        assert [(c.previous_qty, c.quantity_delta, c.product.quantity) for c in seen] == [
            (0, 5, 5),
            (5, 2, 7),
            (7, -3, 4),
        ]
        assert seen[-1].actor_id == "u-seller"

    def test_failed_operations_report_nothing(self, product_store, clock):
        seen = []
        reconciler = StockReconciler(product_store, clock=clock, listeners=[seen.append])
        product = reconciler.refill("SKU1", "Widget", 100, 1)
        seen.clear()

        with pytest.raises(InsufficientStock):
            reconciler.sell(product.id, 2)
        assert seen == []
