from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shared.config.database import create_tables
from shared.config.settings import Settings
from shared.observability import setup_observability
from shared.security import limiter

from services.context import AppContext, build_context
from services.contact_service.router import router as contact_router
from services.payment_service.router import router as payment_router

logger = structlog.get_logger(__name__)


def create_app(settings: Optional[Settings] = None, context: Optional[AppContext] = None) -> FastAPI:
    """
    Builds the relay app. Production passes nothing and gets clients built
    from the environment; tests pass an AppContext holding fakes.
    """
    settings = settings or (context.settings if context else Settings.from_env())
    context = context or build_context(settings)

    app = FastAPI(title="Storefront Payment Relay", version="1.0.0")
    app.state.context = context

    # --- OBSERVABILITY BOOTSTRAP ---
    setup_observability(app, "storefront_relay", settings)

    # --- SECURITY SETUP ---
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(payment_router)
    app.include_router(contact_router)

    @app.get("/health", include_in_schema=False)
    async def health_check():
        return {"service": "storefront_relay", "status": "running", "capabilities": context.capabilities()}

    @app.on_event("startup")
    async def startup_event():
        if context.engine is not None:
            await create_tables(context.engine)
        logger.info("relay_started", port=settings.port, capabilities=context.capabilities())

    @app.on_event("shutdown")
    async def shutdown_event():
        await context.aclose()

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=app.state.context.settings.port)
