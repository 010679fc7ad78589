"""
Rules loader and ops validation tests.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from cms_versioning.app_shell.config import missing_env, validate_ops_rules
from cms_versioning.rules import DEFAULT_RULES_PATH, extract_yaml, load_rules, parse_rules

MINIMAL = """
project:
  slug: test
  rules_version: "1"
"""


class TestParseRules:
    def test_minimal_rules_get_defaults(self) -> None:
        rules = parse_rules(MINIMAL)

        assert rules.project.slug == "test"
        assert rules.content.default_language == "en"
        assert "Json" in rules.content.block_types
        assert rules.scheduling.enabled is True
        assert rules.scheduling.poll_interval_seconds == 60
        assert rules.ops.log_level == "INFO"

    def test_yaml_fence_is_stripped(self) -> None:
        text = "# Rules\n\nSome prose.\n\n```yaml\n" + MINIMAL + "```\n\nMore prose.\n"

        rules = parse_rules(text)

        assert rules.project.slug == "test"

    def test_extract_without_fence_returns_input(self) -> None:
        assert extract_yaml(MINIMAL) == MINIMAL

    def test_invalid_yaml(self) -> None:
        with pytest.raises(ValueError, match="Invalid YAML"):
            parse_rules("project: [unclosed")

    def test_missing_project_fails(self) -> None:
        with pytest.raises(ValueError, match="validation failed"):
            parse_rules("ops:\n  log_level: INFO\n")

    def test_unknown_block_type_fails(self) -> None:
        with pytest.raises(ValueError):
            parse_rules(MINIMAL + "content:\n  block_types: [Text, Video]\n")

    def test_default_language_must_be_listed(self) -> None:
        with pytest.raises(ValueError, match="default_language"):
            parse_rules(MINIMAL + "content:\n  default_language: de\n  languages: [en]\n")

    def test_non_positive_poll_interval_fails(self) -> None:
        with pytest.raises(ValueError):
            parse_rules(MINIMAL + "scheduling:\n  poll_interval_seconds: 0\n")

    def test_log_level_normalized(self) -> None:
        rules = parse_rules(MINIMAL + "ops:\n  log_level: debug\n")
        assert rules.ops.log_level == "DEBUG"

    def test_bad_log_level(self) -> None:
        with pytest.raises(ValueError):
            parse_rules(MINIMAL + "ops:\n  log_level: LOUD\n")


class TestLoadRules:
    def test_packaged_defaults_load(self) -> None:
        rules = load_rules()

        assert DEFAULT_RULES_PATH.exists()
        assert rules.project.slug == "cms-versioning"
        assert rules.content.languages == ["en"]

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_rules(tmp_path / "nope.yaml")

    def test_load_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text(MINIMAL + "scheduling:\n  enabled: false\n")

        rules = load_rules(path)

        assert rules.scheduling.enabled is False


class TestOpsValidation:
    def test_missing_env_listed(self) -> None:
        rules = parse_rules(MINIMAL + "ops:\n  required_env: [CMS_A, CMS_B]\n")

        assert missing_env(rules, {"CMS_A": "1"}) == ["CMS_B"]

    def test_validate_exits_when_env_missing(self) -> None:
        rules = parse_rules(MINIMAL + "ops:\n  required_env: [CMS_SECRET]\n")

        with pytest.raises(SystemExit):
            validate_ops_rules(rules, {})

    def test_validate_passes(self) -> None:
        rules = parse_rules(MINIMAL + "ops:\n  required_env: [CMS_SECRET]\n")

        validate_ops_rules(rules, {"CMS_SECRET": "x"})
