"""Conventional Commits header parser.

Only the header (first line) decides whether a message is conventional::

    type(scope)!: subject

The body and git-trailer style footers that follow are split out for
callers that want them, but never affect validity. Parsing is pure: no
I/O, no logging, and malformed input yields a ``ParsedCommit`` with
``type`` and ``subject`` set to ``None`` instead of raising.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional

HEADER_PATTERN = re.compile(
    r"^(?P<type>[A-Za-z0-9_]+)"
    r"(?:\((?P<scope>.+?)\))?"
    r"(?P<breaking>!)?"
    r":\s+"
    r"(?P<subject>.+)$"
)

_FOOTER_PATTERN = re.compile(r"^(?P<token>BREAKING[ -]CHANGE|[A-Za-z][\w-]*)(?::\s|\s#)(?P<value>.*)$")

_BREAKING_TOKENS = frozenset({"BREAKING CHANGE", "BREAKING-CHANGE"})


@dataclass(frozen=True)
class ParsedCommit:
    """Structured view of one commit message or pull-request title.

    ``type`` and ``subject`` are either both set or both ``None``; the
    latter is how a non-conventional message is reported.
    """

    raw_header: str
    type: Optional[str] = None
    scope: Optional[str] = None
    breaking: bool = False
    subject: Optional[str] = None
    body: str = ""
    footers: tuple[tuple[str, str], ...] = ()

    @property
    def is_conventional(self) -> bool:
        return self.type is not None and self.subject is not None

    @property
    def is_breaking_change(self) -> bool:
        return self.breaking or any(token in _BREAKING_TOKENS for token, _ in self.footers)


def split_header(raw: str) -> str:
    return raw.split("\n", 1)[0]


def _split_body_and_footers(lines: list[str]) -> tuple[str, tuple[tuple[str, str], ...]]:
    # The footer block is the trailing paragraph, and only when its first line is a trailer.
    while lines and not lines[-1].strip():
        lines = lines[:-1]
    if not lines:
        return "", ()

    start = len(lines)
    while start > 0 and lines[start - 1].strip():
        start -= 1
    if not _FOOTER_PATTERN.match(lines[start]):
        return "\n".join(lines).strip(), ()

    footers: list[tuple[str, list[str]]] = []
    for line in lines[start:]:
        match = _FOOTER_PATTERN.match(line)
        if match:
            footers.append((match.group("token"), [match.group("value")]))
        else:
            footers[-1][1].append(line)

    body = "\n".join(lines[:start]).strip()
    return body, tuple((token, "\n".join(value).strip()) for token, value in footers)


def parse(raw: str) -> ParsedCommit:
    header = split_header(raw)
    match = HEADER_PATTERN.match(header)
    if not match:
        return ParsedCommit(raw_header=header)

    subject = match.group("subject").strip()
    if not subject:
        return ParsedCommit(raw_header=header)

    # Only "\n" ends a line, matching split_header; str.splitlines also breaks on \u2028 and \x1c-\x1e.
    lines = [line[:-1] if line.endswith("\r") else line for line in raw.split("\n")[1:]]
    body, footers = _split_body_and_footers(lines)
    return ParsedCommit(
        raw_header=header,
        type=match.group("type").lower(),
        scope=match.group("scope"),
        breaking=match.group("breaking") is not None,
        subject=subject,
        body=body,
        footers=footers,
    )


def parse_many(messages: Iterable[tuple[str, str]]) -> list[tuple[str, ParsedCommit]]:
    """Parse ``(identifier, raw message)`` pairs, keeping their order."""
    return [(identifier, parse(raw)) for identifier, raw in messages]
