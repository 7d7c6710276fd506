"""
Unit tests for the layered configuration loader.
"""

import json

import pytest
import yaml

from lern_startup.config import (
    DEFAULT_CONFIG_JSON,
    DEFAULT_CONFIG_YAML,
    ConfigLoader,
    ConfigResolver,
    load_configuration,
)
from lern_startup.core.errors import ConfigurationFileError


class TestConfigLoader:
    """Test cases for ConfigLoader."""

    def test_base_layer_only(self, config_dir, environ):
        tree = load_configuration([config_dir], environ=environ)

        assert tree.get("DatabaseHost") == "localhost"
        assert tree.get("LogLevel") == "DEBUG"

    def test_explicit_environment_overlay(self, config_dir, environ):
        tree = load_configuration([config_dir], environment="Production", environ=environ)

        assert tree.get("DatabaseHost") == "db.prod.internal"
        assert tree.get("DatabasePort") == 5432
        assert tree.get("LogLevel") == "WARNING"
        assert tree.children("GzipMimeTypes") == ["application/json"]
        assert tree.get("Smtp:Host") == "localhost"
        assert tree.get("Smtp:Port") == 465

    def test_overlay_selected_by_environment_variable(self, config_dir, environ):
        environ["ENVIRONMENT"] = "Production"

        tree = load_configuration([config_dir], environ=environ)

        assert tree.get("DatabaseHost") == "db.prod.internal"

    def test_overlay_selected_by_base_file(self, temp_dir, environ):
        (temp_dir / "appsettings.json").write_text(
            json.dumps({"Environment": "Staging", "LogLevel": "INFO"}), encoding="utf-8"
        )
        (temp_dir / "appsettings.Staging.json").write_text(
            json.dumps({"LogLevel": "DEBUG"}), encoding="utf-8"
        )

        tree = load_configuration([temp_dir], environ=environ)

        assert tree.get("LogLevel") == "DEBUG"

    def test_missing_overlay_is_not_an_error(self, config_dir, environ):
        tree = load_configuration([config_dir], environment="Staging", environ=environ)
        assert tree.get("LogLevel") == "DEBUG"

    def test_no_files_gives_empty_tree(self, temp_dir, environ):
        tree = load_configuration([temp_dir], environ=environ)
        assert len(tree) == 0

    def test_first_search_dir_wins(self, temp_dir, environ):
        first = temp_dir / "first"
        second = temp_dir / "second"
        first.mkdir()
        second.mkdir()
        (first / "appsettings.yaml").write_text("Name: first\n", encoding="utf-8")
        (second / "appsettings.yaml").write_text("Name: second\n", encoding="utf-8")

        tree = load_configuration([first, second], environ=environ)

        assert tree.get("Name") == "first"

    def test_non_string_yaml_keys_merge_with_overlay(self, temp_dir, environ):
        (temp_dir / "appsettings.yaml").write_text(
            "Ports:\n  80: http\n  on: enabled\n", encoding="utf-8"
        )
        (temp_dir / "appsettings.Production.yaml").write_text(
            "Ports:\n  443: https\n  80: redirect\n", encoding="utf-8"
        )

        tree = load_configuration([temp_dir], environment="Production", environ=environ)

        assert tree.get("Ports:80") == "redirect"
        assert tree.get("Ports:443") == "https"
        assert tree.get("Ports:True") == "enabled"

    def test_empty_file_is_empty_mapping(self, temp_dir):
        path = temp_dir / "appsettings.yaml"
        path.write_text("", encoding="utf-8")

        assert ConfigLoader([temp_dir]).load_file(path) == {}

    def test_malformed_yaml(self, temp_dir, environ):
        (temp_dir / "appsettings.yaml").write_text("Key: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigurationFileError) as exc_info:
            load_configuration([temp_dir], environ=environ)

        assert "appsettings.yaml" in str(exc_info.value)

    def test_malformed_json(self, temp_dir, environ):
        (temp_dir / "appsettings.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigurationFileError):
            load_configuration([temp_dir], environ=environ)

    def test_top_level_must_be_mapping(self, temp_dir, environ):
        (temp_dir / "appsettings.yaml").write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigurationFileError, match="mapping"):
            load_configuration([temp_dir], environ=environ)


class TestDefaultTemplates:
    """The shipped sample configuration must load and resolve."""

    def test_yaml_and_json_agree(self):
        assert yaml.safe_load(DEFAULT_CONFIG_YAML) == json.loads(DEFAULT_CONFIG_JSON)

    def test_sample_resolves(self, temp_dir, environ):
        (temp_dir / "appsettings.yaml").write_text(DEFAULT_CONFIG_YAML, encoding="utf-8")
        resolver = ConfigResolver(load_configuration([temp_dir], environ=environ), environ)

        assert resolver.get_int("DatabasePort") == 5432
        assert resolver.get_bool("GzipEnabled") is True
        assert resolver.get_duration("StartupRetryDelay").total_seconds() == 5
        assert "application/json" in resolver.get_list("GzipMimeTypes")
