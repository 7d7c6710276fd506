"""Tests for the startup exception hierarchy."""

import pytest

from lern_startup.core.errors import (
    ConfigurationFileError,
    InvalidArgumentError,
    InvalidConfigurationValueError,
    LernStartupError,
    RetryBudgetExhaustedError,
)


@pytest.mark.parametrize("error", [
    InvalidArgumentError("bad key"),
    InvalidConfigurationValueError("SmtpPort", "abc", "int", "environment"),
    RetryBudgetExhaustedError(3, ConnectionError("refused")),
    ConfigurationFileError("appsettings.yaml", "parse error"),
])
def test_all_errors_share_base(error):
    assert isinstance(error, LernStartupError)


def test_argument_and_value_errors_are_value_errors():
    assert issubclass(InvalidArgumentError, ValueError)
    assert issubclass(InvalidConfigurationValueError, ValueError)
    assert not issubclass(RetryBudgetExhaustedError, ValueError)


def test_invalid_value_message():
    error = InvalidConfigurationValueError("SmtpPort", "abc", "int", "environment", "expected base-10 digits")

    message = str(error)
    assert "SmtpPort" in message
    assert "'abc'" in message
    assert "int" in message
    assert "environment" in message
    assert "expected base-10 digits" in message


def test_retry_exhausted_message_names_action_and_attempts():
    error = RetryBudgetExhaustedError(5, TimeoutError("no answer"), action_name="DatabaseReadiness.ensure_ready")

    assert error.attempts == 5
    assert "DatabaseReadiness.ensure_ready" in str(error)
    assert "5 time(s)" in str(error)
    assert "TimeoutError: no answer" in str(error)
