"""
Snap transaction creation and the Midtrans HTTP notification webhook.

The webhook is unauthenticated at the HTTP layer; the signature_key in the
body is what authenticates it. Responses are plain text because Midtrans
only looks at the status code.
"""
from typing import Any

import structlog
from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from services.context import AppContext, get_context
from services.order_service.reconciler import OrderReconciler
from shared.errors import ConfigurationError, SignatureError
from shared.observability import relay_notifications_total

from .schemas import ErrorResponse, TransactionResponse
from .service import NotificationService, TransactionService

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Payments"])


@router.post(
    "/create-transaction",
    response_model=TransactionResponse,
    responses={500: {"model": ErrorResponse}},
)
async def create_transaction(
    payload: dict[str, Any] = Body(...),
    context: AppContext = Depends(get_context),
):
    try:
        service = TransactionService(context.require_gateway())
        return await service.create_transaction(payload)
    except Exception as e:
        logger.error("create_transaction_failed", error=str(e))
        return JSONResponse(status_code=500, content={"error": str(e)})


@router.post("/midtrans-notification", response_class=PlainTextResponse)
async def midtrans_notification(request: Request, context: AppContext = Depends(get_context)):
    try:
        payload = await request.json()
    except ValueError:
        return PlainTextResponse("Malformed notification", status_code=400)
    if not isinstance(payload, dict):
        return PlainTextResponse("Malformed notification", status_code=400)

    try:
        context.require_gateway()
        service = NotificationService(context.settings.gateway.server_key)
        notification = service.authenticate(payload)
        reconciler = OrderReconciler(context.require_store(), context.settings.shipping_item_id)
        outcome = await service.reconcile(reconciler, notification, payload)
    except SignatureError:
        return PlainTextResponse("Invalid signature", status_code=403)
    except ConfigurationError as e:
        logger.error("webhook_disabled", error=str(e))
        return PlainTextResponse("Internal Server Error", status_code=500)
    except Exception:
        relay_notifications_total.labels(outcome="error").inc()
        logger.exception("webhook_error", order_id=payload.get("order_id"))
        return PlainTextResponse("Internal Server Error", status_code=500)

    return PlainTextResponse(outcome.acknowledgement, status_code=200)
