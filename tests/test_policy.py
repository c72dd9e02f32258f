from __future__ import annotations

import pytest

from commit_lint.parser import parse
from commit_lint.policy import (
    FORMAT_REASON,
    InvalidEntry,
    ValidationVerdict,
    classify,
    disallowed_type_reason,
    evaluate,
    validate_messages,
)
from shared.constants import DEFAULT_ALLOWED_TYPES


def test_empty_input_is_trivially_valid() -> None:
    assert evaluate([], ["feat"]) == ValidationVerdict(all_valid=True, total=0, invalid=())
    assert evaluate([], []) == ValidationVerdict(all_valid=True, total=0, invalid=())


def test_valid_without_scope() -> None:
    verdict = validate_messages([("PR #1 title", "feat: add login")], ["feat", "fix"])
    assert verdict == ValidationVerdict(all_valid=True, total=1, invalid=())


def test_valid_with_scope_and_breaking_marker() -> None:
    verdict = validate_messages([("abc", "feat(auth)!: rewrite login")], DEFAULT_ALLOWED_TYPES)
    assert verdict.all_valid is True
    assert verdict.total == 1


def test_malformed_message_is_invalid() -> None:
    verdict = validate_messages([("abc", "update the code")], DEFAULT_ALLOWED_TYPES)
    assert verdict.all_valid is False
    assert verdict.invalid == (
        InvalidEntry(identifier="abc", header="update the code", reason="does not follow conventional commit format"),
    )


def test_disallowed_type_reason_names_type_and_allow_list() -> None:
    verdict = validate_messages([("abc", "docs: update readme")], ["feat", "fix"])
    assert verdict.all_valid is False
    reason = verdict.invalid[0].reason
    assert reason == "type 'docs' is not allowed; allowed types: feat, fix"
    assert "'docs'" in reason
    assert "feat, fix" in reason


def test_empty_allow_list_rejects_everything() -> None:
    verdict = validate_messages([("abc", "feat: x")], [])
    assert verdict.all_valid is False
    assert verdict.invalid[0].reason == disallowed_type_reason("feat", [])


def test_multiline_message_only_header_counts() -> None:
    verdict = validate_messages([("abc", "fix: resolve issue\n\nCloses #123")], DEFAULT_ALLOWED_TYPES)
    assert verdict.all_valid is True


def test_allow_list_membership_is_case_insensitive() -> None:
    assert validate_messages([("a", "Feat: x")], ["feat"]).all_valid is True
    assert validate_messages([("a", "feat: x")], ["FEAT"]).all_valid is True


def test_format_failure_checked_before_allow_list() -> None:
    assert classify(parse("feat"), []) == FORMAT_REASON


def test_invalid_entries_keep_input_order() -> None:
    messages = [
        ("c1", "bogus one"),
        ("c2", "feat: fine"),
        ("c3", "docs: not allowed"),
        ("c4", "bogus two"),
    ]
    verdict = validate_messages(messages, ["feat"])
    assert verdict.total == 4
    assert [entry.identifier for entry in verdict.invalid] == ["c1", "c3", "c4"]
    assert [entry.header for entry in verdict.invalid] == ["bogus one", "docs: not allowed", "bogus two"]


def test_invalid_entry_carries_raw_header_not_full_message() -> None:
    verdict = validate_messages([("c1", "wip\n\nlots of detail")], ["feat"])
    assert verdict.invalid[0].header == "wip"


def test_evaluate_is_deterministic() -> None:
    parsed = [("c1", parse("feat: a")), ("c2", parse("nope"))]
    assert evaluate(parsed, ["feat"]) == evaluate(parsed, ["feat"])


def test_evaluate_accepts_generators() -> None:
    parsed = ((str(i), parse(f"fix: change {i}")) for i in range(3))
    verdict = evaluate(parsed, ("fix",))
    assert verdict.total == 3
    assert verdict.all_valid is True


@pytest.mark.parametrize("commit_type", DEFAULT_ALLOWED_TYPES)
def test_every_default_type_is_accepted(commit_type: str) -> None:
    assert validate_messages([("c", f"{commit_type}: something")], DEFAULT_ALLOWED_TYPES).all_valid is True
