from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

from commit_lint.policy import validate_messages
from commit_lint.report import (
    action_outputs,
    annotation_lines,
    build_report,
    log_verdict,
    status_description,
    workflow_command,
    write_action_outputs,
)
from shared.schema import InvalidCommitRecord, InvalidTitleRecord


def _commit_report(allowed: tuple[str, ...] = ("feat", "fix")):
    verdict = validate_messages(
        [("a" * 40, "feat: ok"), ("b" * 40, "wip"), ("c" * 40, "docs: readme")],
        allowed,
    )
    return build_report(verdict, "commits")


def test_build_report_for_commits_uses_hash_and_message() -> None:
    report = _commit_report()
    assert report.valid is False
    assert report.total == 3
    assert report.invalid == [
        InvalidCommitRecord(hash="b" * 40, message="wip", reason="does not follow conventional commit format"),
        InvalidCommitRecord(
            hash="c" * 40,
            message="docs: readme",
            reason="type 'docs' is not allowed; allowed types: feat, fix",
        ),
    ]


def test_build_report_for_title_uses_title_field() -> None:
    verdict = validate_messages([("PR #3 title", "Update stuff")], ("feat",))
    report = build_report(verdict, "title")
    assert report.invalid == [
        InvalidTitleRecord(title="Update stuff", reason="does not follow conventional commit format")
    ]


def test_action_outputs_shape() -> None:
    outputs = action_outputs(_commit_report())
    assert outputs["valid"] == "false"
    assert outputs["total-commits"] == "3"
    invalid = json.loads(outputs["invalid-commits"])
    assert invalid[0] == {"hash": "b" * 40, "message": "wip", "reason": "does not follow conventional commit format"}
    assert set(invalid[1]) == {"hash", "message", "reason"}


def test_action_outputs_for_passing_title() -> None:
    report = build_report(validate_messages([("t", "feat: x")], ("feat",)), "title")
    assert action_outputs(report) == {"valid": "true", "total-commits": "1", "invalid-commits": "[]"}


def test_write_action_outputs_appends_heredoc_blocks(tmp_path: Path) -> None:
    output_file = tmp_path / "github_output"
    output_file.write_text("existing=1\n", encoding="utf-8")

    write_action_outputs({"valid": "true", "invalid-commits": "[]"}, str(output_file))

    lines = output_file.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "existing=1"
    assert lines[1].startswith("valid<<ghadelimiter_")
    assert lines[2] == "true"
    assert lines[3] == lines[1].split("<<", 1)[1]
    assert lines[4].startswith("invalid-commits<<")
    assert lines[5] == "[]"


def test_write_action_outputs_without_file_is_noop(tmp_path: Path) -> None:
    write_action_outputs({"valid": "true"}, "")
    assert list(tmp_path.iterdir()) == []


def test_workflow_command_escapes_newlines() -> None:
    assert workflow_command("error", "50% done\nnext") == "::error::50%25 done%0Anext"


def test_annotation_lines() -> None:
    lines = annotation_lines(_commit_report())
    assert lines[0] == "::error::bbbbbbbb `wip`: does not follow conventional commit format"
    assert lines[-1].startswith("::error::Conventional commit validation failed.")
    assert len(lines) == 3


def test_annotation_lines_empty_when_valid() -> None:
    report = build_report(validate_messages([], ("feat",)), "commits")
    assert annotation_lines(report) == []


def test_log_verdict_emits_one_warning_per_invalid_entry() -> None:
    logger = MagicMock()
    log_verdict(logger, _commit_report())
    assert logger.warning.call_count == 2
    event, = logger.info.call_args.args
    assert event == "validation_failed"
    assert logger.info.call_args.kwargs["extra"]["extra"]["invalid_count"] == 2


def test_status_description_variants() -> None:
    assert status_description(_commit_report(("feat", "fix", "docs"))) == "1 of 3 commit(s) are not conventional"

    passing = build_report(validate_messages([("t", "feat: x")], ("feat",)), "title")
    assert status_description(passing) == "Conventional commit check passed for title"

    failing = build_report(validate_messages([("t", "docs: x")], ("feat",)), "title")
    assert status_description(failing) == "PR title: type 'docs' is not allowed; allowed types: feat"


def test_status_description_truncated_to_github_limit() -> None:
    allowed = tuple(f"type{i}" for i in range(40))
    report = build_report(validate_messages([("t", "zzz: x")], allowed), "title")
    description = status_description(report)
    assert len(description) == 140
    assert description.endswith("...")
