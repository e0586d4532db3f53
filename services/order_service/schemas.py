from typing import List, Optional

from pydantic import BaseModel


class OrderItem(BaseModel):
    id: str
    quantity: int

    class Config:
        extra = "allow"  # name, price, image... are kept but never read here


class OrderSnapshot(BaseModel):
    id: str
    status: str
    items: List[OrderItem] = []
    total_amount: float = 0
    payment_result: Optional[dict] = None

    class Config:
        from_attributes = True
