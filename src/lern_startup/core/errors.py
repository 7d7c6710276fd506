"""
Exception hierarchy for the Lern startup layer.

Every error raised by this package derives from LernStartupError so the
bootstrap can turn any of them into a startup failure with a single handler.
"""

from typing import Any, Optional


class LernStartupError(Exception):
    """Base exception for configuration and startup errors."""
    pass


class InvalidArgumentError(LernStartupError, ValueError):
    """Raised when a caller passes an unusable argument (empty key, bad budget)."""
    pass


class InvalidConfigurationValueError(LernStartupError, ValueError):
    """
    Raised when a configured value cannot be converted to the requested type.

    Attributes:
        key: Configuration key being resolved
        raw_value: Value as found in the source
        target_type: Name of the requested type
        source: Where the value came from ("environment" or "tree")
    """

    def __init__(
        self,
        key: str,
        raw_value: Any,
        target_type: str,
        source: str,
        reason: Optional[str] = None
    ):
        self.key = key
        self.raw_value = raw_value
        self.target_type = target_type
        self.source = source
        self.reason = reason

        message = (
            f"Invalid value {raw_value!r} for configuration key '{key}' "
            f"(from {source}): expected {target_type}"
        )
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class RetryBudgetExhaustedError(LernStartupError):
    """
    Raised when a retried action still fails after its last allowed attempt.

    The last failure is available as ``last_error`` and as ``__cause__``.
    """

    def __init__(self, attempts: int, last_error: BaseException, action_name: Optional[str] = None):
        self.attempts = attempts
        self.last_error = last_error
        self.action_name = action_name

        target = f"'{action_name}'" if action_name else "action"
        super().__init__(
            f"Retry budget exhausted: {target} failed {attempts} time(s); "
            f"last error: {type(last_error).__name__}: {last_error}"
        )


class ConfigurationFileError(LernStartupError):
    """Raised when a configuration file exists but cannot be read or parsed."""

    def __init__(self, path: Any, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load configuration file {path}: {reason}")
