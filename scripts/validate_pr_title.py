#!/usr/bin/env python3
"""Check a pull request title locally before pushing.

    python scripts/validate_pr_title.py "feat(api): add pagination"
"""

from __future__ import annotations

import sys

sys.path.append("src")
from commit_lint.config import parse_allowed_types  # noqa: E402
from commit_lint.policy import validate_messages  # noqa: E402


def main() -> int:
    if len(sys.argv) < 2:
        print("Usage: validate_pr_title.py <title> [allowed,types]")
        return 2

    title = sys.argv[1]
    allowed_types = parse_allowed_types(sys.argv[2] if len(sys.argv) > 2 else None)
    verdict = validate_messages([("PR title", title)], allowed_types)
    if verdict.all_valid:
        print(f"PR title matches convention: {title}")
        return 0

    print(f"PR title {title!r}: {verdict.invalid[0].reason}")
    print("Expected format: type(scope)!: subject")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
