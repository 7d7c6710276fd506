"""
Configuration resolver.

Resolves typed values for camel-case configuration keys by checking an
environment variable override first and the structured configuration tree
second:

- ``SmtpPort`` is shadowed by ``SMTP_PORT``
- ``GzipMinimumBytes`` is shadowed by ``GZIP_MINIMUM_BYTES``

An environment variable only counts when it is set and non-empty. Values that
are present but cannot be converted raise InvalidConfigurationValueError;
the resolver never falls back to another source or to a default once a source
has supplied a value.
"""

import logging
import math
import os
import re
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Dict, List, Mapping, Optional, Type, TypeVar

from ..core.errors import InvalidArgumentError, InvalidConfigurationValueError
from .tree import ConfigTree, is_section

logger = logging.getLogger(__name__)

T = TypeVar("T")

LIST_SEPARATOR = ";"

SOURCE_ENVIRONMENT = "environment"
SOURCE_TREE = "tree"
SOURCE_ABSENT = "absent"

_INTEGER_PATTERN = re.compile(r"^[+-]?[0-9]+$")
_DECIMAL_PATTERN = re.compile(r"^[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$")
_TIMESPAN_PATTERN = re.compile(
    r"^(?:(?P<days>\d+)\.)?(?P<hours>\d{1,2}):(?P<minutes>\d{1,2}):(?P<seconds>\d{1,2}(?:\.\d+)?)$",
    re.ASCII,
)


def _require_key(key: Any) -> str:
    if not isinstance(key, str) or not key.strip():
        raise InvalidArgumentError(f"Configuration key must be a non-empty string, got {key!r}")
    return key


def env_var_name(key: str) -> str:
    """
    Derive the environment variable name that overrides a configuration key.

    Every uppercase character after the first gets a '_' in front of it, then
    the whole name is uppercased. Consecutive capitals are split too:
    ``IDValue`` becomes ``I_D_VALUE``.

    Raises:
        InvalidArgumentError: If key is empty or whitespace
    """
    key = _require_key(key)
    return "".join(
        f"_{char}" if index > 0 and char.isupper() else char
        for index, char in enumerate(key)
    ).upper()


# Conversions. Each takes (key, raw value, source) and returns the converted
# value or raises InvalidConfigurationValueError.

def _to_string(key: str, raw: Any, source: str) -> str:
    if isinstance(raw, bool):
        return "true" if raw else "false"
    return str(raw)


def _to_int(key: str, raw: Any, source: str) -> int:
    if isinstance(raw, bool):
        raise InvalidConfigurationValueError(key, raw, "int", source, "boolean is not an integer")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if raw.is_integer():
            return int(raw)
        raise InvalidConfigurationValueError(key, raw, "int", source, "not a whole number")
    text = str(raw).strip()
    if not _INTEGER_PATTERN.match(text):
        raise InvalidConfigurationValueError(key, raw, "int", source, "expected base-10 digits")
    return int(text, 10)


def _to_float(key: str, raw: Any, source: str) -> float:
    if isinstance(raw, bool):
        raise InvalidConfigurationValueError(key, raw, "float", source, "boolean is not a number")
    if isinstance(raw, (int, float)):
        try:
            value = float(raw)
        except OverflowError:
            raise InvalidConfigurationValueError(key, raw, "float", source, "out of range") from None
    else:
        text = str(raw).strip()
        if not _DECIMAL_PATTERN.match(text):
            raise InvalidConfigurationValueError(key, raw, "float", source, "expected a decimal number")
        value = float(text)
    if not math.isfinite(value):
        raise InvalidConfigurationValueError(key, raw, "float", source, "must be finite")
    return value


def _to_bool(key: str, raw: Any, source: str) -> bool:
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    raise InvalidConfigurationValueError(key, raw, "bool", source, "expected 'true' or 'false'")


def _to_duration(key: str, raw: Any, source: str) -> timedelta:
    if isinstance(raw, timedelta):
        return raw
    if isinstance(raw, bool):
        raise InvalidConfigurationValueError(key, raw, "duration", source)
    if isinstance(raw, (int, float)):
        seconds = raw
    else:
        text = str(raw).strip()
        match = _TIMESPAN_PATTERN.match(text)
        if match:
            minutes = int(match.group("minutes"))
            seconds_part = float(match.group("seconds"))
            if minutes >= 60 or seconds_part >= 60:
                raise InvalidConfigurationValueError(
                    key, raw, "duration", source, "minutes and seconds must be below 60"
                )
            try:
                return timedelta(
                    days=int(match.group("days") or 0),
                    hours=int(match.group("hours")),
                    minutes=minutes,
                    seconds=seconds_part,
                )
            except (OverflowError, ValueError):
                raise InvalidConfigurationValueError(key, raw, "duration", source, "out of range") from None
        if not _DECIMAL_PATTERN.match(text):
            raise InvalidConfigurationValueError(
                key, raw, "duration", source, "expected '[d.]hh:mm:ss' or a number of seconds"
            )
        seconds = float(text)
    if isinstance(seconds, float) and not math.isfinite(seconds):
        raise InvalidConfigurationValueError(key, raw, "duration", source, "must be finite")
    if seconds < 0:
        raise InvalidConfigurationValueError(key, raw, "duration", source, "must not be negative")
    try:
        return timedelta(seconds=seconds)
    except (OverflowError, ValueError):
        raise InvalidConfigurationValueError(key, raw, "duration", source, "out of range") from None


_CONVERTERS: Dict[type, Callable[[str, Any, str], Any]] = {
    str: _to_string,
    int: _to_int,
    float: _to_float,
    bool: _to_bool,
    timedelta: _to_duration,
}


@dataclass(frozen=True)
class Resolution:
    """Where a key's raw value comes from, before any type conversion."""
    key: str
    env_name: str
    source: str
    raw_value: Any


class ConfigResolver:
    """
    Resolve configuration keys against the environment and a ConfigTree.

    The environment mapping is read on every call, so changes made to it
    after construction are always visible.
    """

    def __init__(self, tree: Optional[ConfigTree] = None, environ: Optional[Mapping[str, str]] = None):
        """
        Initialize the resolver.

        Args:
            tree: Structured configuration; an empty tree if omitted
            environ: Environment mapping; os.environ if omitted
        """
        self.tree = tree if tree is not None else ConfigTree.empty()
        self._environ = environ

    @property
    def environ(self) -> Mapping[str, str]:
        return self._environ if self._environ is not None else os.environ

    def _env_value(self, key: str) -> Optional[str]:
        value = self.environ.get(env_var_name(key))
        return value if value else None

    def describe(self, key: str) -> Resolution:
        """
        Report which source answers for a key, without converting the value.

        Raises:
            InvalidArgumentError: If key is empty or whitespace
        """
        name = env_var_name(key)
        env_value = self._env_value(key)
        if env_value is not None:
            return Resolution(key, name, SOURCE_ENVIRONMENT, env_value)

        tree_value = self.tree.get(key)
        if tree_value is not None:
            return Resolution(key, name, SOURCE_TREE, tree_value)

        return Resolution(key, name, SOURCE_ABSENT, None)

    def get(self, key: str, value_type: Type[T], default: Optional[T] = None) -> Optional[T]:
        """
        Resolve a key as one of str, int, float, bool or timedelta.

        Args:
            key: Configuration key
            value_type: Requested type
            default: Returned when neither source has a value

        Returns:
            Converted value, or default when the key is absent everywhere

        Raises:
            InvalidArgumentError: If key is empty or value_type is unsupported
            InvalidConfigurationValueError: If a present value cannot be converted
        """
        _require_key(key)
        converter = _CONVERTERS.get(value_type)
        if converter is None:
            raise InvalidArgumentError(f"Unsupported configuration type: {value_type!r}")

        resolution = self.describe(key)
        raw = resolution.raw_value

        if resolution.source == SOURCE_ABSENT:
            return default

        if resolution.source == SOURCE_TREE:
            if is_section(raw):
                raise InvalidConfigurationValueError(
                    key, raw, value_type.__name__, SOURCE_TREE, "key names a section, not a value"
                )
            if raw == "" and value_type is not str:
                return default

        value = converter(key, raw, resolution.source)
        logger.debug(f"Resolved '{key}' from {resolution.source}")
        return value

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.get(key, str, default)

    def get_int(self, key: str, default: Optional[int] = None) -> Optional[int]:
        return self.get(key, int, default)

    def get_float(self, key: str, default: Optional[float] = None) -> Optional[float]:
        return self.get(key, float, default)

    def get_bool(self, key: str, default: Optional[bool] = None) -> Optional[bool]:
        return self.get(key, bool, default)

    def get_duration(self, key: str, default: Optional[timedelta] = None) -> Optional[timedelta]:
        """Resolve a duration given as '[d.]hh:mm:ss[.fff]' or as seconds."""
        return self.get(key, timedelta, default)

    def get_list(self, key: str) -> List[str]:
        """
        Resolve a list-valued key.

        An environment override is split on ';' with empty segments kept.
        Otherwise the children of the tree section are returned in declared
        order; children that are themselves sections are skipped.

        Returns:
            List of strings, empty if the key is absent everywhere

        Raises:
            InvalidArgumentError: If key is empty or whitespace
        """
        _require_key(key)
        env_value = self._env_value(key)
        if env_value is not None:
            return env_value.split(LIST_SEPARATOR)

        return [
            _to_string(key, child, SOURCE_TREE)
            for child in self.tree.children(key)
            if child is not None and not is_section(child)
        ]
