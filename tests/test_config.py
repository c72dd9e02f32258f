from __future__ import annotations

import pytest

from commit_lint.config import (
    ConfigError,
    LintConfig,
    config_from_action_inputs,
    config_from_env,
    get_action_input,
    parse_allowed_types,
    parse_bool,
    parse_validate,
)
from shared.constants import DEFAULT_ALLOWED_TYPES


# -- allow-list parsing --------------------------------------------------------


def test_allowed_types_default_when_unset_or_blank() -> None:
    assert parse_allowed_types(None) == DEFAULT_ALLOWED_TYPES
    assert parse_allowed_types("") == DEFAULT_ALLOWED_TYPES
    assert parse_allowed_types("   ") == DEFAULT_ALLOWED_TYPES


def test_allowed_types_trimmed_and_lowercased() -> None:
    assert parse_allowed_types(" feat , Fix,docs ") == ("feat", "fix", "docs")


def test_allowed_types_only_separators_is_empty() -> None:
    assert parse_allowed_types(" , ,") == ()


# -- scalar inputs -------------------------------------------------------------


@pytest.mark.parametrize("raw", ["true", "TRUE", "1", "yes", "on"])
def test_parse_bool_true(raw: str) -> None:
    assert parse_bool(raw, "flag") is True


@pytest.mark.parametrize("raw", ["false", "0", "no", "off"])
def test_parse_bool_false(raw: str) -> None:
    assert parse_bool(raw, "flag", default=True) is False


def test_parse_bool_blank_uses_default() -> None:
    assert parse_bool(None, "flag", default=True) is True
    assert parse_bool("", "flag") is False


def test_parse_bool_rejects_garbage() -> None:
    with pytest.raises(ConfigError, match="flag"):
        parse_bool("maybe", "flag")


def test_parse_validate() -> None:
    assert parse_validate(None) == "title"
    assert parse_validate("Commits") == "commits"
    with pytest.raises(ConfigError):
        parse_validate("everything")


# -- action inputs -------------------------------------------------------------


def test_get_action_input_reads_hyphenated_and_underscored_names() -> None:
    assert get_action_input("target-branch", {"INPUT_TARGET-BRANCH": " release "}) == "release"
    assert get_action_input("target-branch", {"INPUT_TARGET_BRANCH": "develop"}) == "develop"
    assert get_action_input("target-branch", {}) == ""


def test_config_from_action_inputs_defaults() -> None:
    assert config_from_action_inputs({}) == LintConfig()


def test_config_from_action_inputs_overrides() -> None:
    env = {
        "INPUT_ALLOWED-TYPES": "feat, fix",
        "INPUT_TARGET-BRANCH": "release",
        "INPUT_VALIDATE": "commits",
        "INPUT_SKIP-MERGE-COMMITS": "true",
        "INPUT_STRICT-MODE": "true",
    }
    config = config_from_action_inputs(env)
    assert config.allowed_types == ("feat", "fix")
    assert config.target_branch == "release"
    assert config.validate == "commits"
    assert config.skip_merge_commits is True
    assert config.strict_mode is True


def test_config_from_env() -> None:
    config = config_from_env({"ALLOWED_TYPES": "chore", "TARGET_BRANCH": "trunk"})
    assert config.allowed_types == ("chore",)
    assert config.target_branch == "trunk"
    assert config.validate == "title"
