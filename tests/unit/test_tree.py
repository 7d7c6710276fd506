"""
Unit tests for the structured configuration tree.
"""

import pytest

from lern_startup.config import ConfigTree, flatten, merge_sections


class TestConfigTree:
    """Test cases for ConfigTree."""

    def test_get_scalar(self, sample_tree):
        assert sample_tree.get("SmtpHost") == "mail.lern.local"

    def test_get_missing(self, sample_tree):
        assert sample_tree.get("Nope") is None
        assert sample_tree.get("Database:Nope") is None
        assert sample_tree.get("SmtpHost:Child") is None

    def test_sequence_index_path(self, sample_tree):
        assert sample_tree.get("GzipMimeTypes:1") == "application/json"
        assert sample_tree.get("GzipMimeTypes:9") is None

    def test_non_ascii_digit_segment_is_absent(self, sample_tree):
        assert sample_tree.get("GzipMimeTypes:²") is None
        assert sample_tree.get("GzipMimeTypes:١") is None

    def test_exact_match_preferred_over_case_fold(self):
        tree = ConfigTree({"key": "lower", "Key": "upper"})
        assert tree.get("Key") == "upper"
        assert tree.get("key") == "lower"

    def test_null_leaf_is_absent(self):
        tree = ConfigTree({"Optional": None})
        assert tree.get("Optional") is None
        assert "Optional" not in tree

    def test_contains(self, sample_tree):
        assert "SmtpPort" in sample_tree
        assert "database:host" in sample_tree

    def test_children(self, sample_tree):
        assert sample_tree.children("GzipMimeTypes") == ["text/html", "application/json", "text/css"]
        assert sample_tree.children("Database") == ["db.internal", 5433]
        assert sample_tree.children("Missing") == []

    def test_tree_is_immutable(self, sample_tree):
        section = sample_tree.get("Database")
        with pytest.raises(TypeError):
            section["Host"] = "elsewhere"
        assert isinstance(sample_tree.get("GzipMimeTypes"), tuple)

    def test_source_mutation_does_not_leak(self):
        data = {"Hosts": ["a"], "Nested": {"Value": 1}}
        tree = ConfigTree(data)
        data["Hosts"].append("b")
        data["Nested"]["Value"] = 2

        assert tree.children("Hosts") == ["a"]
        assert tree.get("Nested:Value") == 1

    def test_to_dict_round_trip(self, sample_tree):
        copy = sample_tree.to_dict()
        copy["SmtpHost"] = "changed"
        assert sample_tree.get("SmtpHost") == "mail.lern.local"
        assert copy["GzipMimeTypes"] == ["text/html", "application/json", "text/css"]

    def test_empty(self):
        tree = ConfigTree.empty()
        assert len(tree) == 0
        assert tree.get("Anything") is None


class TestMergeSections:
    """Test cases for merge_sections."""

    def test_overlay_wins_for_scalars(self):
        assert merge_sections({"A": 1, "B": 2}, {"B": 3}) == {"A": 1, "B": 3}

    def test_nested_mappings_merge(self):
        merged = merge_sections(
            {"Smtp": {"Host": "localhost", "Port": 25}},
            {"Smtp": {"Port": 465}},
        )
        assert merged == {"Smtp": {"Host": "localhost", "Port": 465}}

    def test_sequences_replaced_wholesale(self):
        merged = merge_sections({"Types": ["a", "b"]}, {"Types": ["c"]})
        assert merged == {"Types": ["c"]}

    def test_keys_merge_case_insensitively(self):
        merged = merge_sections({"LogLevel": "INFO"}, {"loglevel": "DEBUG"})
        assert merged == {"LogLevel": "DEBUG"}

    def test_non_string_keys_stringified(self):
        merged = merge_sections({80: "http", True: "on"}, {80: "redirect", 443: "https"})
        assert merged == {"80": "redirect", "True": "on", "443": "https"}

    def test_base_unchanged(self):
        base = {"Smtp": {"Port": 25}}
        merge_sections(base, {"Smtp": {"Port": 465}})
        assert base == {"Smtp": {"Port": 25}}


def test_flatten(sample_tree):
    flat = flatten(sample_tree)

    assert flat["SmtpPort"] == 587
    assert flat["Database:Host"] == "db.internal"
    assert flat["GzipMimeTypes:0"] == "text/html"
    assert "EmptySection" not in flat
