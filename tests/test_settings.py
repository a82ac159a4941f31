"""Tests for settings loading and build parameters."""

import json
from pathlib import Path

import pytest

from game_asset_bundler.core.validator import validate_settings_with_error_details
from game_asset_bundler.errors import ConfigurationError
from game_asset_bundler.settings import (
    BuildParameters,
    BuildTarget,
    CollectRule,
    CollectSettings,
    NamingPolicy,
    load_settings,
)


class TestCollectSettings:
    """Test settings document parsing."""

    def test_defaults(self) -> None:
        """Test that optional settings fall back to their defaults."""
        settings = CollectSettings.from_document(
            {"collectors": [{"collect_folder_path": "Assets/UI/", "build_rule": "by_folder_path"}]}
        )

        assert settings.asset_root == "Assets"
        assert settings.info_folder == "Assets/BuildInfo"
        assert settings.dependency_naming is NamingPolicy.BY_FILE_PATH
        assert settings.rules[0].path == "Assets/UI"
        assert settings.rules[0].collect_rule is CollectRule.COLLECT
        assert ".mp4" in settings.media_postfixes

    def test_collect_folders_skip_ignore_rules(self) -> None:
        """Test that ignore rules are not enumerated."""
        settings = CollectSettings.from_document(
            {
                "collectors": [
                    {"collect_folder_path": "Assets/UI/Temp", "collect_rule": "ignore", "build_rule": "by_file_path"},
                    {"collect_folder_path": "Assets/UI", "build_rule": "by_folder_path"},
                ]
            }
        )
        assert settings.collect_folders() == ["Assets/UI"]

    def test_blacklist_is_case_insensitive_for_postfixes(self) -> None:
        """Test that blacklisted postfixes match regardless of case."""
        settings = CollectSettings.from_document(
            {"blacklist": {"postfixes": [".CS"]}, "collectors": []}
        )
        assert settings.blacklist.is_black_postfix(".cs")

    def test_const_name_required(self) -> None:
        """Test that by_const_name rules require a const_name."""
        with pytest.raises(ConfigurationError, match="const_name"):
            CollectSettings.from_document(
                {"collectors": [{"collect_folder_path": "Assets/Shaders", "build_rule": "by_const_name"}]}
            )

    def test_unknown_build_rule_rejected(self) -> None:
        """Test that an unknown build rule fails validation."""
        with pytest.raises(ConfigurationError):
            CollectSettings.from_document(
                {"collectors": [{"collect_folder_path": "Assets/UI", "build_rule": "by_magic"}]}
            )

    def test_invalid_document_reports_location(self) -> None:
        """Test that a schema failure names the offending field and value."""
        with pytest.raises(ConfigurationError) as exc_info:
            CollectSettings.from_document(
                {"collectors": [{"collect_folder_path": "Assets/UI", "build_rule": "by_magic"}]}
            )
        message = str(exc_info.value)
        assert message.startswith("Validation error at collectors -> 0 -> build_rule")
        assert "Invalid value: by_magic" in message

    def test_describe_rule(self) -> None:
        """Test that a rule renders in the readme format."""
        settings = CollectSettings.from_document(
            {
                "collectors": [
                    {
                        "collect_folder_path": "Assets/Shaders",
                        "build_rule": "by_const_name",
                        "const_name": "Shaders",
                    }
                ]
            }
        )
        assert settings.rules[0].describe() == (
            "Directory : Assets/Shaders || CollectRule : collect"
            " || BuildRule : by_const_name || ConstName : Shaders"
        )


class TestLoadSettings:
    """Test loading settings from disk."""

    def test_load(self, tmp_path: Path) -> None:
        """Test that a settings file loads from disk."""
        path = tmp_path / "bundles.json"
        path.write_text(
            json.dumps({"collectors": [{"collect_folder_path": "Assets/UI", "build_rule": "by_file_path"}]}),
            encoding="utf-8",
        )
        assert load_settings(path).rules[0].naming is NamingPolicy.BY_FILE_PATH

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing settings file is a configuration error."""
        with pytest.raises(ConfigurationError, match="not found"):
            load_settings(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Test that malformed JSON is a configuration error."""
        path = tmp_path / "bundles.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="not valid JSON"):
            load_settings(path)

    def test_error_details(self) -> None:
        """Test that validation reports details for invalid documents only."""
        valid, message = validate_settings_with_error_details({"collectors": [], "extra": 1})
        assert not valid
        assert "extra" in message

        valid, message = validate_settings_with_error_details({"collectors": []})
        assert valid
        assert message is None


class TestBuildParameters:
    """Test build parameter helpers."""

    def test_output_dir_per_platform(self, tmp_path: Path) -> None:
        """Test that output goes to a per-platform directory."""
        params = BuildParameters(target=BuildTarget.ANDROID, output_root=tmp_path)
        assert params.output_dir == tmp_path / "android"
        assert params.postfix == "android"

    def test_use_cache_follows_force_rebuild(self, tmp_path: Path) -> None:
        """Test that cache reuse is the inverse of force rebuild."""
        assert BuildParameters(BuildTarget.IOS, tmp_path).use_cache
        assert not BuildParameters(BuildTarget.IOS, tmp_path, force_rebuild=True).use_cache

    def test_missing_output_root(self) -> None:
        """Test that a missing output root is rejected."""
        with pytest.raises(ConfigurationError, match="Output directory"):
            BuildParameters(BuildTarget.IOS, None).output_dir

    @pytest.mark.parametrize("output_root", [None, "", "   ", Path("")])
    def test_blank_output_root_is_rejected(self, output_root) -> None:
        """Test that blank output roots, including Path(""), count as missing."""
        params = BuildParameters(BuildTarget.WINDOWS, output_root)
        assert not params.has_output_root
        with pytest.raises(ConfigurationError, match="Output directory cannot be empty"):
            params.output_dir

    def test_string_output_root(self, tmp_path: Path) -> None:
        """Test that a string output root resolves like a path."""
        params = BuildParameters(BuildTarget.ANDROID, str(tmp_path))
        assert params.has_output_root
        assert params.output_dir == tmp_path / "android"

    def test_none_target_has_no_postfix(self, tmp_path: Path) -> None:
        """Test that the unselected target has no postfix."""
        with pytest.raises(ConfigurationError):
            BuildParameters(BuildTarget.NONE, tmp_path).postfix
