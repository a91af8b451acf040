"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from confswap.session import SwapSession, create_session


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    await app.state.session.start()
    yield
    # Shutdown
    app.state.session.orchestrator.reset()


def create_app(session: Optional[SwapSession] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        session: Session to serve (built from settings when omitted)
    """
    session = session or create_session()
    settings = session.settings

    app = FastAPI(
        title="ConfSwap API",
        description="Confidential token swap API",
        version="0.1.0",
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.session = session

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routes
    from confswap.api.routes import health
    from confswap.web.controllers import (
        assets_router,
        balances_router,
        notifications_router,
        quotes_router,
        swaps_router,
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(assets_router, prefix="/api/v1")
    app.include_router(quotes_router, prefix="/api/v1")
    app.include_router(swaps_router, prefix="/api/v1")
    app.include_router(balances_router, prefix="/api/v1")
    app.include_router(notifications_router, prefix="/api/v1")

    return app
