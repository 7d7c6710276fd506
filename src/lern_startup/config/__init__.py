"""
Configuration package for the Lern API.

This package provides:
- An immutable structured configuration tree loaded from YAML/JSON files
- A resolver that lets environment variables shadow every key
- Typed settings dataclasses for the startup consumers
"""

from .tree import ConfigTree, merge_sections, flatten

from .resolver import (
    ConfigResolver,
    Resolution,
    env_var_name,
    LIST_SEPARATOR,
    SOURCE_ENVIRONMENT,
    SOURCE_TREE,
    SOURCE_ABSENT,
)

from .settings import (
    AppSettings,
    DatabaseSettings,
    SmtpSettings,
    CompressionSettings,
    LoggingSettings,
    StartupSettings,
    Environment,
)

from .loader import (
    ConfigLoader,
    load_configuration,
    DEFAULT_CONFIG_YAML,
    DEFAULT_CONFIG_JSON,
)

__all__ = [
    # Tree
    "ConfigTree",
    "merge_sections",
    "flatten",

    # Resolver
    "ConfigResolver",
    "Resolution",
    "env_var_name",
    "LIST_SEPARATOR",
    "SOURCE_ENVIRONMENT",
    "SOURCE_TREE",
    "SOURCE_ABSENT",

    # Settings
    "AppSettings",
    "DatabaseSettings",
    "SmtpSettings",
    "CompressionSettings",
    "LoggingSettings",
    "StartupSettings",
    "Environment",

    # Loader
    "ConfigLoader",
    "load_configuration",
    "DEFAULT_CONFIG_YAML",
    "DEFAULT_CONFIG_JSON",
]
