"""
Logging configuration for the Lern API process.

This module provides:
- Structured logging with JSON output (python-json-logger)
- Console and rotating file handlers
- Environment-specific logger levels
- Performance logging for startup steps
"""

import logging
import logging.handlers
import sys
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from pythonjsonlogger import jsonlogger

from ..config.settings import Environment, LoggingSettings

SERVICE_NAME = "lern-api"


class StructuredFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding service, environment and timing fields."""

    def __init__(self, *args, environment: Optional[Environment] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.environment = environment or Environment.DEVELOPMENT

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['service'] = SERVICE_NAME
        log_record['environment'] = self.environment.value

        if hasattr(record, 'perf_duration_ms'):
            log_record['duration_ms'] = record.perf_duration_ms
        if hasattr(record, 'perf_operation'):
            log_record['operation'] = record.perf_operation


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(config: LoggingSettings, environment: Environment) -> None:
    """
    Set up process-wide logging.

    Args:
        config: Logging settings
        environment: Deployment environment
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    level = _level(config.level)
    root_logger.setLevel(level)

    if config.structured:
        formatter = StructuredFormatter(
            fmt='%(timestamp)s %(level)s %(name)s %(message)s',
            environment=environment,
        )
    else:
        formatter = logging.Formatter(
            fmt=config.format,
            datefmt=config.date_format
        )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if config.log_file_path:
        log_path = Path(config.log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=str(log_path),
            maxBytes=config.max_file_size,
            backupCount=config.backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    if environment == Environment.PRODUCTION:
        # Reduce noise from third-party libraries
        logging.getLogger('sqlalchemy').setLevel(logging.WARNING)
        logging.getLogger('asyncio').setLevel(logging.WARNING)
        logging.getLogger('lern_startup.config').setLevel(logging.INFO)
    elif environment == Environment.DEVELOPMENT:
        logging.getLogger('lern_startup.config').setLevel(logging.DEBUG)


class PerformanceLogger:
    """Logger for startup step timing."""

    def __init__(self, logger_name: str = 'lern_startup.performance'):
        self.logger = logging.getLogger(logger_name)

    def log_operation(
        self,
        operation: str,
        duration_ms: float,
        success: bool = True,
        extra: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log operation performance."""
        level = logging.INFO if success else logging.WARNING

        extra_data = dict(extra or {})
        extra_data.update({
            'perf_operation': operation,
            'perf_duration_ms': duration_ms,
            'perf_success': success,
        })

        outcome = "completed" if success else "failed"
        self.logger.log(
            level,
            f"Operation {operation} {outcome} in {duration_ms:.2f}ms",
            extra=extra_data
        )

    @contextmanager
    def measure(self, operation: str, **extra) -> Iterator[None]:
        """Time the enclosed block and log it; failures are logged and re-raised."""
        start_time = time.perf_counter()
        try:
            yield
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            self.log_operation(operation, duration_ms, success=False, extra={**extra, 'error': str(e)})
            raise
        duration_ms = (time.perf_counter() - start_time) * 1000
        self.log_operation(operation, duration_ms, extra=extra)


performance_logger = PerformanceLogger()


def log_performance(operation: str, duration_ms: float, **extra):
    """Convenience function for performance logging."""
    performance_logger.log_operation(operation, duration_ms, extra=extra)
