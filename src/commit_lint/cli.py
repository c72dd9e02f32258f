"""Validate commit messages from a local git range or a commit-msg hook file.

Usage::

    commit-lint --rev-range origin/main..HEAD
    commit-lint --message-file .git/COMMIT_EDITMSG
    commit-lint --allowed-types feat,fix --format json

Exit codes match the GitHub Action: 0 pass, 1 violations, 2 the check
could not run.
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from commit_lint.config import ConfigError, LintConfig, parse_allowed_types, parse_bool
from commit_lint.policy import validate_messages
from commit_lint.report import FORMAT_HINT, build_report
from commit_lint.sources import Message, SourceError, git_range_source, message_file_source
from shared.logging import get_logger

logger = get_logger("commit_lint_cli")

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_INFRA = 2


def _default_rev_range() -> str:
    base = os.getenv("GITHUB_BASE_REF") or "main"
    head = os.getenv("GITHUB_HEAD_REF") or "HEAD"
    return f"{base}..{head}"


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Validate commit messages against Conventional Commits.")
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--rev-range",
        default=None,
        help="Git revision range passed to `git log` (default: $GITHUB_BASE_REF..$GITHUB_HEAD_REF or main..HEAD).",
    )
    source.add_argument(
        "--message-file",
        default=None,
        help="Commit message file path (for a git commit-msg hook).",
    )
    parser.add_argument(
        "--allowed-types",
        default=os.getenv("ALLOWED_TYPES"),
        help="Comma-separated list of allowed commit types.",
    )
    parser.add_argument(
        "--skip-merge-commits",
        action="store_true",
        help="Ignore merge commits in the range (default: $SKIP_MERGE_COMMITS).",
    )
    parser.add_argument(
        "--strict-mode",
        action="store_true",
        help="Reserved; accepted for parity with the GitHub Action input.",
    )
    parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Output format for the verdict on stdout.",
    )
    return parser


def _collect(args: argparse.Namespace, config: LintConfig) -> list[Message]:
    if args.message_file:
        return message_file_source(Path(args.message_file))
    return git_range_source(args.rev_range or _default_rev_range(), config.skip_merge_commits)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_argument_parser()
    args = parser.parse_args(argv)
    try:
        skip_merge_commits = args.skip_merge_commits or parse_bool(os.getenv("SKIP_MERGE_COMMITS"), "SKIP_MERGE_COMMITS")
    except ConfigError as exc:
        logger.error("configuration_invalid", extra={"extra": {"error": str(exc)}})
        print(f"Error validating commits: {exc}", file=sys.stderr)
        return EXIT_INFRA

    config = LintConfig(
        allowed_types=parse_allowed_types(args.allowed_types),
        skip_merge_commits=skip_merge_commits,
        strict_mode=args.strict_mode,
        validate="commits",
    )

    try:
        messages = _collect(args, config)
    except SourceError as exc:
        logger.error("infrastructure_failure", extra={"extra": {"error": str(exc)}})
        print(f"Error validating commits: {exc}", file=sys.stderr)
        return EXIT_INFRA

    verdict = validate_messages(messages, config.allowed_types)
    report = build_report(verdict, "commits")

    if args.format == "json":
        print(report.model_dump_json())
    elif not report.total:
        print("No commits to validate")
    elif report.valid:
        print(f"All {report.total} commit(s) follow conventional commit format.")
    else:
        print("Conventional commits validation failed:", file=sys.stderr)
        for entry in verdict.invalid:
            print(f" - {entry.identifier[:8]} `{entry.header}`: {entry.reason}", file=sys.stderr)
        print(FORMAT_HINT, file=sys.stderr)
        print(f"Allowed types: {', '.join(config.allowed_types) or '(none)'}", file=sys.stderr)

    return EXIT_OK if report.valid else EXIT_INVALID


if __name__ == "__main__":
    sys.exit(main())
