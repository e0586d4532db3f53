import enum

from sqlalchemy import JSON, Column, Float, Integer, String

from shared.config.database import Base

STATS_ID = "stats"


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class Order(Base):
    __tablename__ = "orders"

    # Assigned by the storefront checkout, not by this service
    id = Column(String, primary_key=True, index=True)
    status = Column(String, nullable=False, default=OrderStatus.PENDING.value)
    items = Column(JSON, nullable=False, default=list)  # [{"id": ..., "quantity": ...}, ...]
    total_amount = Column(Float, nullable=False, default=0)
    payment_result = Column(JSON, nullable=True)


class Product(Base):
    __tablename__ = "products"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=True)
    stock = Column(Integer, nullable=False, default=0)
    sold_count = Column(Integer, nullable=False, default=0)


class SummaryStats(Base):
    __tablename__ = "summary"

    id = Column(String, primary_key=True, default=STATS_ID)
    total_revenue = Column(Float, nullable=False, default=0)
    total_stock = Column(Integer, nullable=False, default=0)
    total_orders = Column(Integer, nullable=False, default=0)
