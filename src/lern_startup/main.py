"""
Main entry point for the Lern API startup sequence.

This module provides:
- Configuration loading and resolver construction
- Settings validation and logging setup
- Database readiness under the fixed-delay retry budget
- Exit with status 1 on any fatal startup failure
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Iterable, Mapping, Optional

from sqlalchemy import MetaData

from .config import AppSettings, ConfigResolver, ConfigTree, load_configuration
from .core.errors import LernStartupError
from .core.logging import setup_logging
from .database import DatabaseReadiness, wait_for_database

logger = logging.getLogger(__name__)

EXIT_STARTUP_FAILURE = 1


class LernApplication:
    """
    Startup orchestration for the Lern API process.

    Owns the configuration tree, the resolver and the database readiness
    checks. Request handling is attached by the web layer after start().
    """

    def __init__(
        self,
        tree: Optional[ConfigTree] = None,
        environ: Optional[Mapping[str, str]] = None,
        metadata: Optional[MetaData] = None,
        search_dirs: Optional[Iterable[Path]] = None
    ):
        self.tree = tree if tree is not None else load_configuration(search_dirs, environ=environ)
        self.resolver = ConfigResolver(self.tree, environ)
        self.settings: Optional[AppSettings] = None
        self.metadata = metadata
        self.readiness: Optional[DatabaseReadiness] = None

    def configure(self) -> AppSettings:
        """Resolve and validate settings, then set up logging."""
        settings = AppSettings.from_resolver(self.resolver)
        settings.validate()
        setup_logging(settings.logging, settings.environment)
        self.settings = settings
        logger.info(f"Lern API starting in {settings.environment.value} mode")
        logger.debug(f"Effective settings: {settings.to_dict()}")
        return settings

    async def start(self, sleep=None) -> None:
        """
        Run the startup sequence.

        Raises:
            LernStartupError: On misconfiguration or exhausted readiness budget
        """
        settings = self.settings or self.configure()

        self.readiness = DatabaseReadiness(settings.database, self.metadata)
        await wait_for_database(self.readiness, settings.startup, sleep=sleep)

        logger.info("Lern API startup completed")

    async def cleanup(self) -> None:
        """Clean up startup resources."""
        if self.readiness:
            await self.readiness.dispose()


async def run(app: LernApplication, sleep=None) -> int:
    """
    Start the application and translate fatal failures into an exit code.

    Returns:
        0 on success, EXIT_STARTUP_FAILURE otherwise
    """
    try:
        await app.start(sleep=sleep)
    except LernStartupError as e:
        logger.critical(f"Fatal startup failure: {e}")
        return EXIT_STARTUP_FAILURE
    finally:
        await app.cleanup()
    return 0


def main() -> None:
    """Main application entry point."""
    try:
        app = LernApplication()
    except LernStartupError as e:
        # Logging is not configured yet
        logging.basicConfig(level=logging.INFO)
        logger.critical(f"Fatal startup failure: {e}")
        sys.exit(EXIT_STARTUP_FAILURE)

    sys.exit(asyncio.run(run(app)))


if __name__ == "__main__":
    main()
