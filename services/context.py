"""
Clients shared by every request, built once at process start.

Handlers receive the AppContext through `get_context` instead of importing
module-level handles, so tests can hand the app in-memory fakes.
"""
from dataclasses import dataclass
from typing import Optional

import structlog
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine

from shared.config.database import build_engine, build_sessionmaker
from shared.config.settings import DATABASE, GATEWAY, MAIL, Settings
from shared.errors import ConfigurationError

from services.contact_service.mailer import MailTransport, SmtpMailTransport
from services.order_service.repository import OrderRepository, OrderStore
from services.payment_service.gateway import MidtransSnapClient, PaymentGateway

logger = structlog.get_logger(__name__)


@dataclass
class AppContext:
    settings: Settings
    gateway: Optional[PaymentGateway] = None
    store: Optional[OrderStore] = None
    mailer: Optional[MailTransport] = None
    engine: Optional[AsyncEngine] = None

    def _require(self, capability: str, client):
        if client is None:
            raise ConfigurationError(capability, self.settings.missing(capability) or ["client"])
        return client

    def require_gateway(self) -> PaymentGateway:
        return self._require(GATEWAY, self.gateway)

    def require_store(self) -> OrderStore:
        return self._require(DATABASE, self.store)

    def require_mailer(self) -> MailTransport:
        return self._require(MAIL, self.mailer)

    def capabilities(self) -> dict[str, bool]:
        return {
            GATEWAY: self.gateway is not None,
            DATABASE: self.store is not None,
            MAIL: self.mailer is not None,
        }

    async def aclose(self) -> None:
        close = getattr(self.gateway, "aclose", None)
        if close is not None:
            await close()
        if self.engine is not None:
            await self.engine.dispose()


def build_context(settings: Settings) -> AppContext:
    """Construct every client whose credentials are present; log the rest as disabled."""
    context = AppContext(settings=settings)

    for capability in (GATEWAY, DATABASE, MAIL):
        absent = settings.missing(capability)
        if absent:
            logger.error("capability_disabled", capability=capability, missing=absent)

    if not settings.missing(GATEWAY):
        context.gateway = MidtransSnapClient(settings.gateway)

    if not settings.missing(DATABASE):
        context.engine = build_engine(settings.database)
        context.store = OrderRepository(build_sessionmaker(context.engine))

    if not settings.missing(MAIL):
        context.mailer = SmtpMailTransport(settings.mail)

    return context


def get_context(request: Request) -> AppContext:
    return request.app.state.context
