import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from services.context import AppContext, get_context
from shared.errors import ConfigurationError
from shared.security import contact_limit_key, contact_rate_limit, limiter

from .schemas import ContactRequest, ContactResponse
from .service import ContactService

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Contact"])


@router.post("/send-contact-email", response_model=ContactResponse)
@limiter.limit(contact_rate_limit, key_func=contact_limit_key)
async def send_contact_email(
    request: Request,                          # REQUIRED: slowapi needs this to check IP
    payload: ContactRequest,
    context: AppContext = Depends(get_context),
):
    try:
        service = ContactService(context.require_mailer())
        await service.send_contact_email(payload)
    except ConfigurationError as e:
        logger.error("contact_relay_disabled", error=str(e))
        return JSONResponse(status_code=500, content={"error": str(e)})
    except Exception as e:
        logger.error("contact_email_failed", error=str(e))
        return JSONResponse(status_code=500, content={"error": "Failed to send email."})
    return ContactResponse(message="Email sent successfully!")
