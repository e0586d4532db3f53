"""
Order store used by the reconciler.

All reads and writes of a reconciliation go through one unit of work bound to
a single database transaction: it commits when the `async with` block exits
cleanly and rolls back on any exception, so an order is never marked paid
without its stock and stats increments.

The paid/failed transitions are conditional updates (`WHERE status <> 'paid'`).
Two concurrent notifications for the same order serialize on the row lock and
the loser sees zero affected rows instead of re-applying side effects.
"""
from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Optional, Protocol

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shared.errors import MissingRecordError

from .models import STATS_ID, Order, OrderStatus, Product, SummaryStats
from .schemas import OrderSnapshot


class OrderUnitOfWork(Protocol):
    async def get_order(self, order_id: str) -> Optional[OrderSnapshot]: ...

    async def mark_paid(self, order_id: str, payment_result: dict) -> Optional[OrderSnapshot]: ...

    async def mark_failed(self, order_id: str) -> bool: ...

    async def increment_product(self, product_id: str, stock: int, sold_count: int) -> None: ...

    async def increment_stats(self, total_revenue: float, total_stock: int, total_orders: int) -> None: ...


class OrderStore(Protocol):
    def transaction(self) -> AsyncContextManager[OrderUnitOfWork]: ...


class OrderUnit:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_order(self, order_id: str) -> Optional[OrderSnapshot]:
        result = await self.db.execute(select(Order).where(Order.id == order_id))
        order = result.scalars().first()
        return OrderSnapshot.model_validate(order) if order else None

    async def mark_paid(self, order_id: str, payment_result: dict) -> Optional[OrderSnapshot]:
        """Move the order to paid unless it already is. Returns the claimed order, or None."""
        stmt = (
            update(Order)
            .where(Order.id == order_id, Order.status != OrderStatus.PAID.value)
            .values(status=OrderStatus.PAID.value, payment_result=payment_result)
            .returning(Order.id, Order.status, Order.items, Order.total_amount, Order.payment_result)
            .execution_options(synchronize_session=False)
        )
        row = (await self.db.execute(stmt)).first()
        if row is None:
            return None
        return OrderSnapshot.model_validate(dict(row._mapping))

    async def mark_failed(self, order_id: str) -> bool:
        stmt = (
            update(Order)
            .where(Order.id == order_id, Order.status != OrderStatus.PAID.value)
            .values(status=OrderStatus.FAILED.value)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount > 0

    async def increment_product(self, product_id: str, stock: int, sold_count: int) -> None:
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .values(stock=Product.stock + stock, sold_count=Product.sold_count + sold_count)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount == 0:
            raise MissingRecordError("product", product_id)

    async def increment_stats(self, total_revenue: float, total_stock: int, total_orders: int) -> None:
        stmt = (
            update(SummaryStats)
            .where(SummaryStats.id == STATS_ID)
            .values(
                total_revenue=SummaryStats.total_revenue + total_revenue,
                total_stock=SummaryStats.total_stock + total_stock,
                total_orders=SummaryStats.total_orders + total_orders,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if result.rowcount == 0:
            raise MissingRecordError("stats", STATS_ID)


class OrderRepository:
    def __init__(self, sessionmaker: async_sessionmaker):
        self.sessionmaker = sessionmaker

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[OrderUnit]:
        async with self.sessionmaker() as db:
            async with db.begin():
                yield OrderUnit(db)
