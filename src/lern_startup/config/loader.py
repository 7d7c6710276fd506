"""
Configuration loader utilities.

Builds the structured configuration tree from layered files:
- appsettings.yaml / appsettings.yml / appsettings.json (base layer)
- appsettings.<Environment>.yaml / .yml / .json (environment overlay)

Later layers are deep-merged over earlier ones. Environment variables are
not merged here; the resolver consults them on every lookup.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

import yaml

from ..core.errors import ConfigurationFileError
from .resolver import ConfigResolver
from .tree import ConfigTree, merge_sections

logger = logging.getLogger(__name__)

BASE_NAME = "appsettings"
SUFFIXES = (".yaml", ".yml", ".json")


class ConfigLoader:
    """Configuration loader with support for layered YAML/JSON files."""

    def __init__(self, search_dirs: Optional[Iterable[Path]] = None, environ: Optional[Mapping[str, str]] = None):
        """
        Args:
            search_dirs: Directories to look for appsettings files in, in
                priority order (first match per layer wins). Defaults to the
                working directory and its ``config`` subdirectory.
            environ: Environment mapping used to pick the overlay layer
        """
        if search_dirs is None:
            search_dirs = [Path.cwd(), Path.cwd() / "config"]
        self.search_dirs: List[Path] = [Path(d) for d in search_dirs]
        self.environ = environ

    def find_file(self, stem: str) -> Optional[Path]:
        """Return the first existing ``<stem><suffix>`` across the search dirs."""
        for directory in self.search_dirs:
            for suffix in SUFFIXES:
                path = directory / f"{stem}{suffix}"
                if path.is_file():
                    return path
        return None

    def load_file(self, path: Path) -> Dict[str, Any]:
        """
        Load a single configuration file.

        Args:
            path: YAML or JSON file

        Returns:
            Parsed top-level mapping (empty for an empty file)

        Raises:
            ConfigurationFileError: If the file cannot be read, parsed, or
                does not contain a mapping at the top level
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                if path.suffix.lower() in (".yaml", ".yml"):
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationFileError(path, f"parse error: {e}") from e
        except OSError as e:
            raise ConfigurationFileError(path, str(e)) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationFileError(path, f"top level must be a mapping, got {type(data).__name__}")

        logger.info(f"Loaded configuration from {path}")
        return data

    def load_tree(self, environment: Optional[str] = None) -> ConfigTree:
        """
        Load the base layer and the environment overlay into a tree.

        Args:
            environment: Overlay name (e.g. "Production"). When omitted it is
                resolved from the ``Environment`` key, environment variable
                first, then the base file.

        Returns:
            Immutable ConfigTree; empty if no files exist
        """
        merged: Dict[str, Any] = {}

        base_path = self.find_file(BASE_NAME)
        if base_path:
            merged = self.load_file(base_path)
        else:
            logger.debug(f"No {BASE_NAME} file found in {[str(d) for d in self.search_dirs]}")

        if environment is None:
            resolver = ConfigResolver(ConfigTree(merged), self.environ)
            environment = resolver.get_string("Environment")

        if environment:
            overlay_path = self.find_file(f"{BASE_NAME}.{environment}")
            if overlay_path:
                merged = merge_sections(merged, self.load_file(overlay_path))

        return ConfigTree(merged)


def load_configuration(
    search_dirs: Optional[Iterable[Path]] = None,
    environment: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None
) -> ConfigTree:
    """
    Convenience function to load the configuration tree.

    Args:
        search_dirs: Optional directories to search for appsettings files
        environment: Optional overlay name
        environ: Optional environment mapping

    Returns:
        Loaded ConfigTree
    """
    loader = ConfigLoader(search_dirs, environ)
    return loader.load_tree(environment)


# Example configuration file template
DEFAULT_CONFIG_YAML = """
Environment: Development

DatabaseHost: localhost
DatabasePort: 5432
DatabaseName: lern
DatabaseUsername: lern
DatabasePassword: lern
DatabasePoolSize: 5

SmtpHost: localhost
SmtpPort: 25
SmtpSender: no-reply@lern.local
SmtpSsl: false

GzipEnabled: true
GzipMinimumBytes: 1024
GzipMimeTypes:
  - text/html
  - text/css
  - application/javascript
  - application/json

LogLevel: INFO
LogStructured: false

StartupRetryAttempts: 5
StartupRetryDelay: "00:00:05"
"""

DEFAULT_CONFIG_JSON = json.dumps(yaml.safe_load(DEFAULT_CONFIG_YAML), indent=2)
