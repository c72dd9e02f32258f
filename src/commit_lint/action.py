"""GitHub Actions entrypoint.

Runs on ``pull_request`` events. When the pull request targets the
protected branch, validates either its title (the eventual squash commit
message) or every commit on it, writes the ``valid``, ``total-commits``
and ``invalid-commits`` step outputs, and exits:

    0  all messages conform, or validation was skipped
    1  at least one message does not conform
    2  the check could not run (configuration, event payload, GitHub API)
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping, Optional

import requests

from commit_lint.config import ConfigError, LintConfig, config_from_action_inputs, get_action_input
from commit_lint.policy import validate_messages
from commit_lint.report import (
    action_outputs,
    annotation_lines,
    build_report,
    log_verdict,
    workflow_command,
    write_action_outputs,
)
from commit_lint.sources import Message, SourceError, pull_request_commit_source, pull_request_title_source
from shared.constants import DEFAULT_API_BASE
from shared.github_client import GitHubClient
from shared.logging import get_logger

logger = get_logger("commit_lint_action")

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_INFRA = 2

SUPPORTED_EVENTS = {"pull_request", "pull_request_target"}


def _load_event(env: Mapping[str, str]) -> dict[str, Any]:
    event_path = env.get("GITHUB_EVENT_PATH") or ""
    if not event_path:
        raise SourceError("GITHUB_EVENT_PATH is not set")
    try:
        return json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise SourceError(f"Could not read event payload {event_path}: {exc}") from exc


def _split_repository(env: Mapping[str, str], event: dict[str, Any]) -> tuple[str, str]:
    full_name = env.get("GITHUB_REPOSITORY") or (event.get("repository") or {}).get("full_name") or ""
    if "/" not in full_name:
        raise SourceError(f"Cannot determine repository from {full_name!r}")
    owner, repo = full_name.split("/", maxsplit=1)
    return owner, repo


def collect_messages(
    gh: GitHubClient,
    owner: str,
    repo: str,
    pr: dict[str, Any],
    config: LintConfig,
) -> list[Message]:
    if config.validate == "commits":
        return pull_request_commit_source(gh, owner, repo, int(pr["number"]), config.skip_merge_commits)
    return pull_request_title_source(pr)


def _run(env: Mapping[str, str], gh: Optional[GitHubClient]) -> int:
    try:
        config = config_from_action_inputs(env)
    except ConfigError as exc:
        print(workflow_command("error", f"Action failed: {exc}"))
        return EXIT_INFRA

    event_name = env.get("GITHUB_EVENT_NAME") or ""
    if event_name not in SUPPORTED_EVENTS:
        logger.info(
            "event_not_supported",
            extra={"extra": {"event_name": event_name}},
        )
        return EXIT_OK

    if not config.allowed_types:
        logger.warning("allowed_types_empty")
    if config.strict_mode:
        logger.info("strict_mode_requested")

    try:
        event = _load_event(env)
        owner, repo = _split_repository(env, event)
        try:
            pull_number = int((event.get("pull_request") or {}).get("number") or event.get("number") or 0)
        except (TypeError, ValueError) as exc:
            raise SourceError(f"Event payload has an invalid pull request number: {exc}") from exc
        if not pull_number:
            raise SourceError("Event payload has no pull request number")

        log = logger.bind(repo=f"{owner}/{repo}", pr_number=pull_number, source=config.validate)
        if gh is None:
            token = get_action_input("token", env) or (env.get("GITHUB_TOKEN") or "").strip()
            if not token:
                raise ConfigError("Input required and not supplied: token")
            gh = GitHubClient(
                token_provider=lambda: token,
                api_base=env.get("GITHUB_API_URL") or DEFAULT_API_BASE,
            )

        try:
            pr = gh.get_pull_request(owner, repo, pull_number)
        except requests.RequestException as exc:
            raise SourceError(f"Could not fetch pull request #{pull_number}: {exc}") from exc

        base_ref = (pr.get("base") or {}).get("ref")
        if base_ref != config.target_branch:
            log.info(
                "validation_skipped",
                extra={"extra": {"base_ref": base_ref, "target_branch": config.target_branch}},
            )
            return EXIT_OK

        messages = collect_messages(gh, owner, repo, pr, config)
    except (SourceError, ConfigError) as exc:
        logger.exception("infrastructure_failure")
        print(workflow_command("error", f"Action failed: {exc}"))
        return EXIT_INFRA

    verdict = validate_messages(messages, config.allowed_types)
    report = build_report(verdict, config.validate)

    log_verdict(log, report)
    write_action_outputs(action_outputs(report), env.get("GITHUB_OUTPUT", ""))
    for line in annotation_lines(report):
        print(line)

    return EXIT_OK if report.valid else EXIT_INVALID


def run(env: Optional[Mapping[str, str]] = None, gh: Optional[GitHubClient] = None) -> int:
    env = os.environ if env is None else env
    try:
        return _run(env, gh)
    except Exception as exc:  # noqa: BLE001
        logger.exception("action_failed")
        print(workflow_command("error", f"Action failed: {exc}"))
        return EXIT_INFRA


def main() -> None:
    raise SystemExit(run())


if __name__ == "__main__":
    main()
