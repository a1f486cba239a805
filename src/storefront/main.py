"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from storefront.api.router import api_router
from storefront.config import Settings, settings
from storefront.core.auth import RequestIdMiddleware
from storefront.core.cache.redis import close_redis_pool
from storefront.core.errors import register_exception_handlers
from storefront.core.jobs.registry import close_arq_pool, init_arq_pool
from storefront.core.logging import RequestLoggingMiddleware
from storefront.core.rate_limit import (
    FixedWindowRateLimiter,
    MemoryRateLimitStore,
    RedisRateLimitStore,
    build_presets,
)
from storefront.modules.intake.notifications import (
    ArqNotificationDispatcher,
    LoggingNotificationDispatcher,
)
from storefront.modules.orders.payments import StripePaymentProvider
from storefront.modules.tenants.origin import OriginGuard
from storefront.modules.tenants.resolver import MemoryTenantCache, RedisTenantCache


# Configure structlog
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        (
            structlog.processors.JSONRenderer()
            if settings.is_production
            else structlog.dev.ConsoleRenderer()
        ),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelNamesMapping().get(settings.log_level.upper(), logging.INFO)
    ),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Handles startup and shutdown events.
    """
    logger.info(
        "application_startup",
        app_name=settings.app_name,
        environment=settings.environment,
    )

    # Notifications are queued through ARQ; without a pool they fail and are logged
    if settings.notifications_backend == "arq":
        try:
            await init_arq_pool()
            logger.info("arq_pool_initialized")
        except Exception as e:
            logger.warning("arq_pool_init_failed", error=str(e))

    yield

    logger.info("application_shutdown")

    await close_arq_pool()
    logger.info("arq_pool_closed")

    await close_redis_pool()
    logger.info("redis_pool_closed")


def configure_state(app: FastAPI, config: Settings) -> None:
    """Construct the long-lived intake stores and attach them to the app.

    Args:
        app: The application to configure
        config: Settings selecting the store backends
    """
    if config.tenant_cache_backend == "redis":
        app.state.tenant_cache = RedisTenantCache(ttl_seconds=config.tenant_cache_ttl_seconds)
    else:
        app.state.tenant_cache = MemoryTenantCache(ttl_seconds=config.tenant_cache_ttl_seconds)

    store = (
        RedisRateLimitStore()
        if config.rate_limit_backend == "redis"
        else MemoryRateLimitStore()
    )
    app.state.rate_limiter = FixedWindowRateLimiter(
        store,
        build_presets(
            standard_requests=config.rate_limit_standard_requests,
            standard_window=config.rate_limit_standard_window,
            payments_requests=config.rate_limit_payments_requests,
            payments_window=config.rate_limit_payments_window,
        ),
    )

    app.state.origin_guard = OriginGuard(
        config.platform_domain,
        allow_dev_origins=config.allow_dev_origins,
    )

    app.state.payments = (
        StripePaymentProvider(config.stripe_secret_key) if config.stripe_secret_key else None
    )

    app.state.notifier = (
        ArqNotificationDispatcher()
        if config.notifications_backend == "arq"
        else LoggingNotificationDispatcher()
    )


def create_app(config: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    config = config or settings
    app = FastAPI(
        title=config.app_name,
        description="Public reservation and order intake for storefront websites",
        version="0.1.0",
        debug=config.debug,
        lifespan=lifespan,
        # Disable docs in production
        docs_url="/docs" if not config.is_production else None,
        redoc_url="/redoc" if not config.is_production else None,
        openapi_url="/openapi.json" if not config.is_production else None,
    )

    configure_state(app, config)

    # Request logging runs inside the request ID middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)

    app.include_router(api_router)

    return app
