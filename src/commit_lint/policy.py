from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from commit_lint.parser import ParsedCommit, parse_many

FORMAT_REASON = "does not follow conventional commit format"


@dataclass(frozen=True)
class InvalidEntry:
    identifier: str
    header: str
    reason: str


@dataclass(frozen=True)
class ValidationVerdict:
    all_valid: bool
    total: int
    invalid: tuple[InvalidEntry, ...] = ()


def disallowed_type_reason(commit_type: str, allowed_types: Sequence[str]) -> str:
    return f"type '{commit_type}' is not allowed; allowed types: {', '.join(allowed_types)}"


def classify(parsed: ParsedCommit, allowed_types: Sequence[str]) -> str | None:
    """Return the rejection reason for one message, or ``None`` when it passes."""
    if parsed.type is None or parsed.subject is None:
        return FORMAT_REASON
    allowed = {allowed_type.lower() for allowed_type in allowed_types}
    if parsed.type.lower() not in allowed:
        return disallowed_type_reason(parsed.type, allowed_types)
    return None


def evaluate(
    parsed_list: Iterable[tuple[str, ParsedCommit]],
    allowed_types: Sequence[str],
) -> ValidationVerdict:
    """Apply the type allow-list to parsed messages.

    An empty input passes trivially; an empty allow-list rejects every
    message. Invalid entries keep the input order and report the raw
    header rather than the parsed structure.
    """
    allowed_types = tuple(allowed_types)
    total = 0
    invalid: list[InvalidEntry] = []
    for identifier, parsed in parsed_list:
        total += 1
        reason = classify(parsed, allowed_types)
        if reason is not None:
            invalid.append(InvalidEntry(identifier=identifier, header=parsed.raw_header, reason=reason))

    return ValidationVerdict(all_valid=not invalid, total=total, invalid=tuple(invalid))


def validate_messages(
    messages: Iterable[tuple[str, str]],
    allowed_types: Sequence[str],
) -> ValidationVerdict:
    """Parse and evaluate ``(identifier, raw message)`` pairs in one pass.

    A pull-request title is the one-element case of a commit list.
    """
    return evaluate(parse_many(messages), allowed_types)
