from typing import Any

import structlog
from pydantic import ValidationError

from services.order_service.reconciler import OrderReconciler, ReconciliationOutcome
from shared.errors import GatewayError, SignatureError
from shared.observability import relay_notifications_total, relay_transactions_total
from shared.security import verify_signature

from .gateway import PaymentGateway
from .schemas import MidtransNotification, TransactionResponse

logger = structlog.get_logger(__name__)


class TransactionService:
    def __init__(self, gateway: PaymentGateway):
        self.gateway = gateway

    async def create_transaction(self, payload: dict[str, Any]) -> TransactionResponse:
        """Forward the storefront's transaction detail verbatim and hand back the Snap token."""
        try:
            transaction = await self.gateway.create_transaction(payload)
        except GatewayError:
            relay_transactions_total.labels(status="failed").inc()
            raise

        # The gateway validates the payload; order_id is only echoed back
        details = payload.get("transaction_details")
        order_id = details.get("order_id") if isinstance(details, dict) else None
        if order_id in (None, ""):
            relay_transactions_total.labels(status="failed").inc()
            raise GatewayError("transaction_details.order_id is required")

        relay_transactions_total.labels(status="success").inc()
        logger.info("transaction_created", order_id=order_id)
        return TransactionResponse(token=transaction["token"], orderId=str(order_id))


class NotificationService:
    def __init__(self, server_key: str):
        self.server_key = server_key

    def verify(self, notification: MidtransNotification) -> None:
        if not verify_signature(
            notification.order_id,
            notification.status_code,
            notification.gross_amount,
            notification.signature_key,
            self.server_key,
        ):
            raise SignatureError("Invalid signature")

    def authenticate(self, payload: dict[str, Any]) -> MidtransNotification:
        """Parse and verify a raw notification body. Needs only the server key."""
        try:
            notification = MidtransNotification.model_validate(payload)
            self.verify(notification)
        except (ValidationError, SignatureError) as e:
            relay_notifications_total.labels(outcome="rejected").inc()
            logger.warning("notification_rejected", order_id=payload.get("order_id"))
            raise SignatureError("Invalid signature") from e
        return notification

    async def reconcile(
        self, reconciler: OrderReconciler, notification: MidtransNotification, payload: dict[str, Any]
    ) -> ReconciliationOutcome:
        outcome = await reconciler.reconcile(
            order_id=notification.order_id,
            transaction_status=notification.transaction_status,
            fraud_status=notification.fraud_status,
            notification=payload,
        )
        relay_notifications_total.labels(outcome=outcome.value).inc()
        return outcome
