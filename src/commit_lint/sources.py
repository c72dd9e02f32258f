"""Collaborators that yield ``(identifier, raw message)`` pairs to validate.

Every failure to reach the underlying system is raised as ``SourceError`` so
entrypoints can tell an infrastructure problem apart from a failed check.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any, Callable

import requests

from shared.github_client import GitHubClient
from shared.logging import get_logger

logger = get_logger("commit_sources")

Message = tuple[str, str]

_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"


class SourceError(RuntimeError):
    pass


def title_identifier(pr: dict[str, Any]) -> str:
    return f"PR #{pr.get('number')} title"


def pull_request_title_source(pr: dict[str, Any]) -> list[Message]:
    """The title stands in for the squashed commit message."""
    return [(title_identifier(pr), pr.get("title") or "")]


def pull_request_commit_source(
    gh: GitHubClient,
    owner: str,
    repo: str,
    pull_number: int,
    skip_merge_commits: bool = False,
) -> list[Message]:
    try:
        commits = gh.list_pull_commits(owner, repo, pull_number)
    except requests.RequestException as exc:
        raise SourceError(f"Could not list commits for {owner}/{repo}#{pull_number}: {exc}") from exc

    messages: list[Message] = []
    for commit in commits:
        if skip_merge_commits and len(commit.get("parents") or []) > 1:
            logger.info("merge_commit_skipped", extra={"extra": {"sha": commit.get("sha")}})
            continue
        sha = str(commit.get("sha") or "")
        if not sha:
            raise SourceError(f"Commit without a sha in {owner}/{repo}#{pull_number}")
        message = (commit.get("commit") or {}).get("message") or ""
        messages.append((sha, message))
    return messages


def _run_git(args: list[str]) -> str:
    return subprocess.check_output(["git", *args], text=True, encoding="utf-8")


def git_range_source(
    rev_range: str,
    skip_merge_commits: bool = False,
    runner: Callable[[list[str]], str] = _run_git,
) -> list[Message]:
    """Read full messages for every commit in ``rev_range`` (``base..head``), newest first."""
    args = ["log", f"--format=%H{_FIELD_SEP}%B{_RECORD_SEP}"]
    if skip_merge_commits:
        args.append("--no-merges")
    args.append(rev_range)

    try:
        output = runner(args)
    except (subprocess.CalledProcessError, OSError) as exc:
        raise SourceError(f"Failed to read git log for range `{rev_range}`: {exc}") from exc

    messages: list[Message] = []
    for record in output.split(_RECORD_SEP):
        record = record.strip("\n")
        if not record or _FIELD_SEP not in record:
            continue
        sha, body = record.split(_FIELD_SEP, 1)
        messages.append((sha.strip(), body))
    return messages


def message_file_source(path: Path) -> list[Message]:
    """Read the message file git hands to a ``commit-msg`` hook.

    Comment lines are dropped the way ``git commit`` strips them by default.
    """
    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as exc:
        raise SourceError(f"Commit message file not readable: {path}: {exc}") from exc

    lines = [line for line in text.splitlines() if not line.startswith("#")]
    while lines and not lines[0].strip():
        lines.pop(0)
    return [(path.name, "\n".join(lines))]
