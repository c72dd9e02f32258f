"""Shared constants used across the CLI, the Action and the Lambda entrypoint."""

from __future__ import annotations

DEFAULT_REGION = "us-east-1"

DEFAULT_API_BASE = "https://api.github.com"

DEFAULT_TARGET_BRANCH = "main"

DEFAULT_ALLOWED_TYPES = (
    "feat",
    "fix",
    "docs",
    "style",
    "refactor",
    "perf",
    "test",
    "build",
    "ci",
    "chore",
    "revert",
)

# Commit status context shown on the pull request checks list
STATUS_CONTEXT = "conventional-commits"

# GitHub rejects commit status descriptions longer than this
MAX_STATUS_DESCRIPTION_LENGTH = 140
