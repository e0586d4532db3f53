"""
Applies a verified gateway notification to the order, product and stats records.

    pending/failed --(capture|settlement + fraud accept)--> paid
    pending/failed --(cancel|deny|expire)-----------------> failed
    paid absorbs everything.

The paid transition and its inventory/stats increments run in one store
transaction; see repository.OrderRepository.
"""
import enum
import time
from typing import Optional

import structlog

from shared.observability import relay_reconciliation_duration_seconds

from .repository import OrderStore, OrderUnitOfWork

logger = structlog.get_logger(__name__)

PAID_STATUSES = frozenset({"capture", "settlement"})
FAILED_STATUSES = frozenset({"cancel", "deny", "expire"})
FRAUD_ACCEPT = "accept"


class ReconciliationOutcome(str, enum.Enum):
    PAID = "paid"
    FAILED = "failed"
    IGNORED = "ignored"
    NOT_FOUND = "not_found"
    ALREADY_PAID = "already_paid"

    @property
    def acknowledgement(self) -> str:
        if self in (ReconciliationOutcome.NOT_FOUND, ReconciliationOutcome.ALREADY_PAID):
            return "Order not found or already processed."
        return "OK"


class OrderReconciler:
    def __init__(self, store: OrderStore, shipping_item_id: str = "SHIPPING_COST"):
        self.store = store
        self.shipping_item_id = shipping_item_id

    async def reconcile(
        self,
        order_id: str,
        transaction_status: Optional[str],
        fraud_status: Optional[str],
        notification: dict,
    ) -> ReconciliationOutcome:
        started = time.perf_counter()
        try:
            if transaction_status in PAID_STATUSES:
                if fraud_status != FRAUD_ACCEPT:
                    outcome = ReconciliationOutcome.IGNORED
                else:
                    outcome = await self._apply_payment(order_id, notification)
            elif transaction_status in FAILED_STATUSES:
                outcome = await self._apply_failure(order_id)
            else:
                outcome = ReconciliationOutcome.IGNORED
        finally:
            relay_reconciliation_duration_seconds.observe(time.perf_counter() - started)

        logger.info(
            "notification_reconciled",
            order_id=order_id,
            transaction_status=transaction_status,
            fraud_status=fraud_status,
            outcome=outcome.value,
        )
        return outcome

    async def _apply_payment(self, order_id: str, notification: dict) -> ReconciliationOutcome:
        async with self.store.transaction() as tx:
            order = await tx.mark_paid(order_id, notification)
            if order is None:
                return await self._why_untouched(tx, order_id)

            total_items_quantity = 0
            for item in order.items:
                if item.id == self.shipping_item_id:
                    continue
                total_items_quantity += item.quantity
                await tx.increment_product(item.id, stock=-item.quantity, sold_count=item.quantity)

            await tx.increment_stats(
                total_revenue=order.total_amount,
                total_stock=-total_items_quantity,
                total_orders=1,
            )

        logger.info(
            "order_paid",
            order_id=order_id,
            items_quantity=total_items_quantity,
            total_amount=order.total_amount,
        )
        return ReconciliationOutcome.PAID

    async def _apply_failure(self, order_id: str) -> ReconciliationOutcome:
        async with self.store.transaction() as tx:
            if await tx.mark_failed(order_id):
                return ReconciliationOutcome.FAILED
            return await self._why_untouched(tx, order_id)

    @staticmethod
    async def _why_untouched(tx: OrderUnitOfWork, order_id: str) -> ReconciliationOutcome:
        if await tx.get_order(order_id) is None:
            return ReconciliationOutcome.NOT_FOUND
        return ReconciliationOutcome.ALREADY_PAID
