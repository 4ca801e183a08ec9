"""
Application entry point.

Creates the FastAPI application and wires together:
- Routers (health, orders, assets, admin)
- Error handlers (centralized domain-to-HTTP mapping)
- Security middleware (headers, rate limiting)
- Logging configuration
- Brokerage services (store, ledger, order lifecycle)

No business logic belongs here.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.application.brokerage.seed_sample_data import SeedSampleDataUseCase
from app.core.config import Settings, settings
from app.infrastructure.brokerage.sql_store import SqlStore
from app.interfaces.brokerage.dependencies import (
    BrokerageServices,
    build_brokerage_services,
)
from app.interfaces.brokerage.router import admin_router, assets_router, orders_router
from app.interfaces.health import router as health_router
from app.shared.errors.handlers import register_error_handlers
from app.shared.logging import configure_logging
from app.shared.security.headers import SecurityHeadersMiddleware
from app.shared.security.rate_limiting import build_limiter, rate_limit_exceeded_handler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: seed sample balances, dispose the database pool."""
    services: BrokerageServices = app.state.brokerage
    if app.state.settings.seed_sample_data:
        SeedSampleDataUseCase(services.ledger).execute()

    yield

    if isinstance(services.store, SqlStore):
        services.store.engine.dispose()
        logger.info("Database connections closed")


def create_app(
    app_settings: Optional[Settings] = None,
    services: Optional[BrokerageServices] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Registers routers, error handlers, and security middleware.
    This is the composition root of the application.

    Args:
        app_settings: Settings to use instead of the environment defaults.
        services: Prebuilt brokerage services, mainly for tests.

    Returns:
        A fully configured FastAPI application instance.
    """
    app_settings = app_settings or settings
    configure_logging(level=app_settings.log_level)

    app = FastAPI(
        title=app_settings.project_name,
        version=app_settings.version,
        docs_url="/docs" if app_settings.debug else None,
        redoc_url="/redoc" if app_settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.brokerage = services or build_brokerage_services(app_settings)

    # --- Rate Limiting ---
    app.state.limiter = build_limiter(app_settings)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # --- Security Middleware ---
    app.add_middleware(SecurityHeadersMiddleware)

    # --- Error Handlers ---
    register_error_handlers(app)

    # --- Routers ---
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(orders_router, prefix="/api/v1")
    app.include_router(assets_router, prefix="/api/v1")
    app.include_router(admin_router, prefix="/api/v1")

    return app


app = create_app()
