"""
Database readiness actions for process startup.

This module provides:
- Engine creation from DatabaseSettings
- A connectivity check (SELECT 1)
- Schema application from caller-supplied SQLAlchemy metadata
- wait_for_database: both steps wrapped in the fixed-delay retry

The entity schema itself is not defined here; the host passes its MetaData.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import MetaData, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from ..config.settings import DatabaseSettings, StartupSettings
from ..core.logging import performance_logger
from ..startup.retry import run_with_retry_async

logger = logging.getLogger(__name__)


def build_engine(settings: DatabaseSettings, **engine_kwargs: Any) -> AsyncEngine:
    """
    Create an async engine for the configured database.

    Pool sizing only applies to server databases; SQLite URLs use
    SQLAlchemy's default pool for the dialect.
    """
    url = make_url(settings.connection_string)
    options: Dict[str, Any] = {"pool_pre_ping": True}
    if not url.get_backend_name().startswith("sqlite"):
        options["pool_size"] = settings.pool_size
    options.update(engine_kwargs)
    return create_async_engine(url, **options)


class DatabaseReadiness:
    """
    Startup readiness checks for the database.

    Each method is a single attempt; retrying is left to the caller.
    """

    def __init__(
        self,
        settings: DatabaseSettings,
        metadata: Optional[MetaData] = None,
        engine: Optional[AsyncEngine] = None
    ):
        """
        Args:
            settings: Database connection settings
            metadata: Schema to create on migrate(); migrate() is a no-op without it
            engine: Existing engine to use instead of building one
        """
        self.settings = settings
        self.metadata = metadata
        self._engine = engine

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = build_engine(self.settings)
        return self._engine

    async def ping(self) -> None:
        """Open a connection and run SELECT 1; raises on any failure."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.debug(f"Database reachable at {self.settings.masked_connection_string}")

    async def migrate(self) -> None:
        """Create any missing tables from the supplied metadata."""
        if self.metadata is None:
            return
        async with self.engine.begin() as conn:
            await conn.run_sync(self.metadata.create_all)
        logger.info(f"Database schema applied ({len(self.metadata.tables)} tables)")

    async def ensure_ready(self) -> None:
        """One readiness attempt: connectivity then schema."""
        await self.ping()
        await self.migrate()

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()


async def wait_for_database(
    readiness: DatabaseReadiness,
    startup: StartupSettings,
    sleep=None
) -> None:
    """
    Retry readiness until the database answers or the budget is spent.

    Args:
        readiness: Readiness checks to run
        startup: Retry budget (attempts and fixed delay)
        sleep: Optional awaitable sleep, for tests

    Raises:
        RetryBudgetExhaustedError: If every attempt fails
    """
    logger.info(
        f"Waiting for database {readiness.settings.masked_connection_string} "
        f"(up to {startup.retry_attempts} attempts, {startup.retry_delay.total_seconds():g}s apart)"
    )
    kwargs = {"sleep": sleep} if sleep is not None else {}
    with performance_logger.measure("database_readiness"):
        await run_with_retry_async(
            readiness.ensure_ready,
            startup.retry_delay,
            startup.retry_attempts,
            **kwargs
        )
    logger.info("Database is ready")
