import asyncio

import pytest

from services.order_service.reconciler import OrderReconciler, ReconciliationOutcome
from shared.errors import MissingRecordError


@pytest.fixture
def reconciler(store):
    return OrderReconciler(store, shipping_item_id="SHIPPING_COST")


async def settle(reconciler, order_id="ORDER-1", status="settlement", fraud="accept"):
    notification = {"order_id": order_id, "transaction_status": status, "fraud_status": fraud}
    return await reconciler.reconcile(order_id, status, fraud, notification)


async def test_settlement_marks_paid_and_adjusts_inventory(reconciler, store):
    outcome = await settle(reconciler)

    assert outcome is ReconciliationOutcome.PAID
    order = store.orders["ORDER-1"]
    assert order["status"] == "paid"
    assert order["payment_result"]["transaction_status"] == "settlement"
    assert store.products["A"] == {"id": "A", "stock": 8, "sold_count": 2}
    assert store.products["SHIPPING_COST"] == {"id": "SHIPPING_COST", "stock": 0, "sold_count": 0}
    # totalStock drops by 2, not 3: the shipping line is not stock
    assert store.stats == {"total_revenue": 1150, "total_stock": 48, "total_orders": 5}


async def test_capture_with_accept_is_paid(reconciler, store):
    assert await settle(reconciler, status="capture") is ReconciliationOutcome.PAID
    assert store.orders["ORDER-1"]["status"] == "paid"


async def test_duplicate_settlement_applies_once(reconciler, store):
    first = await settle(reconciler)
    second = await settle(reconciler)

    assert first is ReconciliationOutcome.PAID
    assert second is ReconciliationOutcome.ALREADY_PAID
    assert store.products["A"]["stock"] == 8
    assert store.products["A"]["sold_count"] == 2
    assert store.stats["total_orders"] == 5
    assert store.stats["total_revenue"] == 1150


async def test_concurrent_settlements_apply_once(reconciler, store):
    outcomes = await asyncio.gather(settle(reconciler), settle(reconciler), settle(reconciler))

    assert sorted(o.value for o in outcomes) == ["already_paid", "already_paid", "paid"]
    assert store.products["A"]["stock"] == 8
    assert store.stats["total_orders"] == 5


@pytest.mark.parametrize("status", ["cancel", "deny", "expire"])
async def test_failure_statuses_mark_failed_without_side_effects(reconciler, store, status):
    outcome = await settle(reconciler, status=status, fraud=None)

    assert outcome is ReconciliationOutcome.FAILED
    assert store.orders["ORDER-1"]["status"] == "failed"
    assert store.products["A"] == {"id": "A", "stock": 10, "sold_count": 0}
    assert store.stats == {"total_revenue": 1000, "total_stock": 50, "total_orders": 4}


async def test_unknown_order_is_acknowledged_without_writes(reconciler, store):
    assert await settle(reconciler, order_id="NOPE") is ReconciliationOutcome.NOT_FOUND
    assert await settle(reconciler, order_id="NOPE", status="cancel") is ReconciliationOutcome.NOT_FOUND
    assert store.writes == 0


@pytest.mark.parametrize("fraud", ["challenge", "deny", None])
async def test_settlement_without_fraud_accept_is_ignored(reconciler, store, fraud):
    assert await settle(reconciler, fraud=fraud) is ReconciliationOutcome.IGNORED
    assert store.orders["ORDER-1"]["status"] == "pending"
    assert store.writes == 0


@pytest.mark.parametrize("status", ["pending", "refund", "authorize", None])
async def test_other_statuses_are_ignored(reconciler, store, status):
    assert await settle(reconciler, status=status) is ReconciliationOutcome.IGNORED
    assert store.writes == 0


async def test_paid_order_is_not_failed_by_late_cancel(reconciler, store):
    await settle(reconciler)

    assert await settle(reconciler, status="expire", fraud=None) is ReconciliationOutcome.ALREADY_PAID
    assert store.orders["ORDER-1"]["status"] == "paid"


async def test_failed_order_can_still_be_paid(reconciler, store):
    await settle(reconciler, status="expire", fraud=None)

    assert await settle(reconciler) is ReconciliationOutcome.PAID
    assert store.orders["ORDER-1"]["status"] == "paid"
    assert store.products["A"]["stock"] == 8


async def test_missing_product_rolls_back_whole_unit(reconciler, store):
    store.add_order("ORDER-2", items=[{"id": "A", "quantity": 1}, {"id": "GHOST", "quantity": 1}], total_amount=99)

    with pytest.raises(MissingRecordError):
        await settle(reconciler, order_id="ORDER-2")

    assert store.orders["ORDER-2"]["status"] == "pending"
    assert store.products["A"]["stock"] == 10
    assert store.stats["total_orders"] == 4
    assert store.writes == 0


async def test_custom_shipping_item_id(store):
    store.add_product("ONGKIR", stock=0)
    store.add_order("ORDER-3", items=[{"id": "A", "quantity": 3}, {"id": "ONGKIR", "quantity": 1}], total_amount=300)
    reconciler = OrderReconciler(store, shipping_item_id="ONGKIR")

    await settle(reconciler, order_id="ORDER-3")

    assert store.products["ONGKIR"]["sold_count"] == 0
    assert store.stats["total_stock"] == 47


def test_acknowledgement_text():
    assert ReconciliationOutcome.PAID.acknowledgement == "OK"
    assert ReconciliationOutcome.IGNORED.acknowledgement == "OK"
    assert ReconciliationOutcome.ALREADY_PAID.acknowledgement == "Order not found or already processed."
