"""Core utilities: exception hierarchy and logging setup."""

from .errors import (
    LernStartupError,
    InvalidArgumentError,
    InvalidConfigurationValueError,
    RetryBudgetExhaustedError,
    ConfigurationFileError,
)

__all__ = [
    "LernStartupError",
    "InvalidArgumentError",
    "InvalidConfigurationValueError",
    "RetryBudgetExhaustedError",
    "ConfigurationFileError",
]
