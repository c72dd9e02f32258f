"""Runtime configuration for the commit gate.

GitHub Actions exposes ``with:`` inputs as ``INPUT_<NAME>`` environment
variables (upper-cased, hyphens kept). The Lambda deployment uses plain
environment variables and the CLI builds a ``LintConfig`` from its flags.
Only this module and the entrypoints read the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from shared.constants import DEFAULT_ALLOWED_TYPES, DEFAULT_TARGET_BRANCH

VALIDATE_CHOICES = ("title", "commits")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class LintConfig:
    allowed_types: tuple[str, ...] = DEFAULT_ALLOWED_TYPES
    target_branch: str = DEFAULT_TARGET_BRANCH
    validate: str = "title"
    skip_merge_commits: bool = False
    # Accepted for workflow compatibility; no grammar rule depends on it yet.
    strict_mode: bool = False


def parse_allowed_types(raw: Optional[str]) -> tuple[str, ...]:
    """Split a comma-separated allow-list.

    Unset or blank input falls back to the default list. Input made only of
    separators yields an empty tuple, which rejects every type.
    """
    if raw is None or not raw.strip():
        return DEFAULT_ALLOWED_TYPES
    return tuple(token.strip().lower() for token in raw.split(",") if token.strip())


def parse_bool(raw: Optional[str], name: str, default: bool = False) -> bool:
    value = (raw or "").strip().lower()
    if not value:
        return default
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be true or false, got {raw!r}")


def parse_validate(raw: Optional[str]) -> str:
    value = (raw or "").strip().lower() or "title"
    if value not in VALIDATE_CHOICES:
        raise ConfigError(f"validate must be one of {', '.join(VALIDATE_CHOICES)}, got {raw!r}")
    return value


def get_action_input(name: str, env: Optional[Mapping[str, str]] = None) -> str:
    """Read an action input the way ``@actions/core`` does.

    Shells cannot export names containing ``-``, so the underscore spelling
    is accepted as a fallback.
    """
    env = os.environ if env is None else env
    key = f"INPUT_{name.replace(' ', '_').upper()}"
    value = env.get(key) or env.get(key.replace("-", "_")) or ""
    return value.strip()


def config_from_action_inputs(env: Optional[Mapping[str, str]] = None) -> LintConfig:
    return LintConfig(
        allowed_types=parse_allowed_types(get_action_input("allowed-types", env)),
        target_branch=get_action_input("target-branch", env) or DEFAULT_TARGET_BRANCH,
        validate=parse_validate(get_action_input("validate", env)),
        skip_merge_commits=parse_bool(get_action_input("skip-merge-commits", env), "skip-merge-commits"),
        strict_mode=parse_bool(get_action_input("strict-mode", env), "strict-mode"),
    )


def config_from_env(env: Optional[Mapping[str, str]] = None) -> LintConfig:
    env = os.environ if env is None else env
    return LintConfig(
        allowed_types=parse_allowed_types(env.get("ALLOWED_TYPES")),
        target_branch=(env.get("TARGET_BRANCH") or "").strip() or DEFAULT_TARGET_BRANCH,
        validate=parse_validate(env.get("VALIDATE")),
        skip_merge_commits=parse_bool(env.get("SKIP_MERGE_COMMITS"), "SKIP_MERGE_COMMITS"),
        strict_mode=parse_bool(env.get("STRICT_MODE"), "STRICT_MODE"),
    )
