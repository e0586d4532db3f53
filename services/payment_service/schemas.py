from typing import Optional

from pydantic import BaseModel, field_validator


class MidtransNotification(BaseModel):
    order_id: Optional[str] = None
    status_code: Optional[str] = None
    gross_amount: Optional[str] = None
    signature_key: Optional[str] = None
    transaction_status: Optional[str] = None
    fraud_status: Optional[str] = None

    class Config:
        extra = "allow"  # the full body is stored on the order as paymentResult

    @field_validator("order_id", "status_code", "gross_amount", "signature_key", mode="before")
    @classmethod
    def _numbers_as_text(cls, value):
        # Signed fields are hashed as text; keep whatever the sender wrote
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class TransactionResponse(BaseModel):
    token: str
    orderId: str


class ErrorResponse(BaseModel):
    error: str
