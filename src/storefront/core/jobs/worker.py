"""ARQ worker configuration.

Defines the worker settings including registered jobs and
startup/shutdown hooks.
"""

from typing import Any, ClassVar

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from storefront.config import settings
from storefront.core.jobs.tasks.notifications import deliver_notification
from storefront.core.jobs.utils import get_redis_settings


async def startup(ctx: dict[str, Any]) -> None:
    """Initialize resources for the worker.

    Called once when the worker starts. Sets up the database
    connection used by jobs.

    Args:
        ctx: Worker context dict (shared across all jobs)
    """
    log = structlog.get_logger()
    log.info("worker_startup", environment=settings.environment)

    engine = create_async_engine(
        settings.async_database_url,
        pool_size=5,
        max_overflow=10,
        echo=settings.database_echo,
    )

    session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    ctx["db_engine"] = engine
    ctx["db_session_factory"] = session_factory

    log.info("worker_startup_complete")


async def shutdown(ctx: dict[str, Any]) -> None:
    """Cleanup resources when the worker stops.

    Args:
        ctx: Worker context dict
    """
    log = structlog.get_logger()
    log.info("worker_shutdown")

    engine = ctx.get("db_engine")
    if engine:
        await engine.dispose()
        log.info("database_engine_disposed")

    log.info("worker_shutdown_complete")


class WorkerSettings:
    """ARQ worker settings.

    Run the worker with:
        arq storefront.core.jobs.worker.WorkerSettings
    """

    functions: ClassVar[list[Any]] = [
        deliver_notification,
    ]

    on_startup = startup
    on_shutdown = shutdown

    redis_settings = get_redis_settings()

    max_jobs = 10
    job_timeout = 60
    keep_result = 3600
    retry_jobs = True
    max_tries = 5  # Delivery is retried independently of the intake request
