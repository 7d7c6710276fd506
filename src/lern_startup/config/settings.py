"""
Typed settings for the Lern API process.

This module provides dataclass views over the configuration resolver for the
components that consume configuration at startup:
- Database connection parameters and connection string
- SMTP mail sender
- Response compression (gzip) allow-list
- Logging
- Startup retry budget

Absent keys fall back to the defaults declared on each dataclass; present but
ill-typed values raise InvalidConfigurationValueError from the resolver.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from ..core.errors import InvalidConfigurationValueError
from .resolver import ConfigResolver


class Environment(str, Enum):
    """Deployment environment enumeration."""
    DEVELOPMENT = "Development"
    STAGING = "Staging"
    PRODUCTION = "Production"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Environment":
        """Parse an environment name case-insensitively; None means development."""
        if value is None:
            return cls.DEVELOPMENT
        for member in cls:
            if member.value.lower() == value.strip().lower():
                return member
        raise InvalidConfigurationValueError(
            "Environment", value, "Environment", "configuration",
            f"expected one of {[m.value for m in cls]}"
        )


@dataclass
class DatabaseSettings:
    """Database connection settings."""
    host: str = "localhost"
    port: int = 5432
    database: str = "lern"
    username: str = "lern"
    password: str = ""
    pool_size: int = 5

    # Takes precedence over the individual fields when set
    url: Optional[str] = None

    @property
    def connection_string(self) -> str:
        """Generate the SQLAlchemy async connection URL."""
        if self.url:
            return self.url
        credentials = quote(self.username, safe="")
        if self.password:
            credentials += ":" + quote(self.password, safe="")
        return f"postgresql+asyncpg://{credentials}@{self.host}:{self.port}/{self.database}"

    @property
    def masked_connection_string(self) -> str:
        """Connection string with credentials hidden, for logging."""
        conn_string = self.connection_string
        if "://" in conn_string and "@" in conn_string:
            protocol_end = conn_string.find("://") + 3
            at_symbol = conn_string.rfind("@")
            if protocol_end < at_symbol:
                return conn_string[:protocol_end] + "***:***" + conn_string[at_symbol:]
        return conn_string

    @classmethod
    def from_resolver(cls, resolver: ConfigResolver) -> "DatabaseSettings":
        defaults = cls()
        return cls(
            host=resolver.get_string("DatabaseHost", defaults.host),
            port=resolver.get_int("DatabasePort", defaults.port),
            database=resolver.get_string("DatabaseName", defaults.database),
            username=resolver.get_string("DatabaseUsername", defaults.username),
            password=resolver.get_string("DatabasePassword", defaults.password),
            pool_size=resolver.get_int("DatabasePoolSize", defaults.pool_size),
            url=resolver.get_string("ConnectionString"),
        )


@dataclass
class SmtpSettings:
    """Mail sender settings. Mail is disabled when no host is configured."""
    host: Optional[str] = None
    port: int = 25
    username: Optional[str] = None
    password: Optional[str] = None
    sender: Optional[str] = None
    use_ssl: bool = False

    @property
    def enabled(self) -> bool:
        return bool(self.host)

    @classmethod
    def from_resolver(cls, resolver: ConfigResolver) -> "SmtpSettings":
        return cls(
            host=resolver.get_string("SmtpHost"),
            port=resolver.get_int("SmtpPort", 25),
            username=resolver.get_string("SmtpUsername"),
            password=resolver.get_string("SmtpPassword"),
            sender=resolver.get_string("SmtpSender"),
            use_ssl=resolver.get_bool("SmtpSsl", False),
        )


DEFAULT_GZIP_MIME_TYPES = [
    "text/plain",
    "text/html",
    "text/css",
    "application/javascript",
    "application/json",
]


@dataclass
class CompressionSettings:
    """Gzip response compression settings."""
    enabled: bool = True
    minimum_bytes: int = 1024
    mime_types: List[str] = field(default_factory=lambda: list(DEFAULT_GZIP_MIME_TYPES))

    def should_compress(self, mime_type: str, size: int) -> bool:
        """Whether a response of this type and size is eligible for gzip."""
        base_type = mime_type.split(";", 1)[0].strip().lower()
        return self.enabled and size >= self.minimum_bytes and base_type in self.mime_types

    @classmethod
    def from_resolver(cls, resolver: ConfigResolver) -> "CompressionSettings":
        mime_types = resolver.get_list("GzipMimeTypes")
        return cls(
            enabled=resolver.get_bool("GzipEnabled", True),
            minimum_bytes=resolver.get_int("GzipMinimumBytes", 1024),
            mime_types=[m.strip().lower() for m in mime_types if m.strip()] or list(DEFAULT_GZIP_MIME_TYPES),
        )


@dataclass
class LoggingSettings:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    # File logging
    log_file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5

    # Structured logging (JSON)
    structured: bool = False

    @classmethod
    def from_resolver(cls, resolver: ConfigResolver) -> "LoggingSettings":
        defaults = cls()
        return cls(
            level=resolver.get_string("LogLevel", defaults.level).upper(),
            format=resolver.get_string("LogFormat", defaults.format),
            date_format=resolver.get_string("LogDateFormat", defaults.date_format),
            log_file_path=resolver.get_string("LogFilePath"),
            max_file_size=resolver.get_int("LogMaxFileSize", defaults.max_file_size),
            backup_count=resolver.get_int("LogBackupCount", defaults.backup_count),
            structured=resolver.get_bool("LogStructured", defaults.structured),
        )


@dataclass
class StartupSettings:
    """Retry budget for dependency readiness at process start."""
    retry_attempts: int = 5
    retry_delay: timedelta = timedelta(seconds=5)

    @classmethod
    def from_resolver(cls, resolver: ConfigResolver) -> "StartupSettings":
        defaults = cls()
        return cls(
            retry_attempts=resolver.get_int("StartupRetryAttempts", defaults.retry_attempts),
            retry_delay=resolver.get_duration("StartupRetryDelay", defaults.retry_delay),
        )


@dataclass
class AppSettings:
    """Main application settings."""
    environment: Environment = Environment.DEVELOPMENT
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    smtp: SmtpSettings = field(default_factory=SmtpSettings)
    compression: CompressionSettings = field(default_factory=CompressionSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    startup: StartupSettings = field(default_factory=StartupSettings)

    @property
    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @classmethod
    def from_resolver(cls, resolver: ConfigResolver) -> "AppSettings":
        """Create application settings from the resolver."""
        return cls(
            environment=Environment.parse(resolver.get_string("Environment")),
            database=DatabaseSettings.from_resolver(resolver),
            smtp=SmtpSettings.from_resolver(resolver),
            compression=CompressionSettings.from_resolver(resolver),
            logging=LoggingSettings.from_resolver(resolver),
            startup=StartupSettings.from_resolver(resolver),
        )

    def validate(self) -> None:
        """Validate values that are well-typed but unusable."""
        if not 0 < self.database.port < 65536:
            raise InvalidConfigurationValueError(
                "DatabasePort", self.database.port, "port number", "configuration", "must be 1-65535"
            )
        if self.database.pool_size <= 0:
            raise InvalidConfigurationValueError(
                "DatabasePoolSize", self.database.pool_size, "positive int", "configuration"
            )
        if self.startup.retry_attempts < 1:
            raise InvalidConfigurationValueError(
                "StartupRetryAttempts", self.startup.retry_attempts, "int >= 1", "configuration"
            )
        if self.compression.minimum_bytes < 0:
            raise InvalidConfigurationValueError(
                "GzipMinimumBytes", self.compression.minimum_bytes, "non-negative int", "configuration"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to a dictionary for logging, without secrets."""
        return {
            "environment": self.environment.value,
            "database": {
                "connection": self.database.masked_connection_string,
                "pool_size": self.database.pool_size,
            },
            "smtp": {
                "enabled": self.smtp.enabled,
                "host": self.smtp.host,
                "port": self.smtp.port,
                "use_ssl": self.smtp.use_ssl,
            },
            "compression": {
                "enabled": self.compression.enabled,
                "minimum_bytes": self.compression.minimum_bytes,
                "mime_types": self.compression.mime_types,
            },
            "logging": {
                "level": self.logging.level,
                "structured": self.logging.structured,
            },
            "startup": {
                "retry_attempts": self.startup.retry_attempts,
                "retry_delay_seconds": self.startup.retry_delay.total_seconds(),
            },
        }
