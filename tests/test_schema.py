import json

import pytest
from pydantic import ValidationError

from shared.schema import InvalidCommitRecord, InvalidTitleRecord, VerdictReport


def test_commit_record_field_names() -> None:
    record = InvalidCommitRecord(hash="abc123", message="wip", reason="does not follow conventional commit format")
    assert record.model_dump() == {
        "hash": "abc123",
        "message": "wip",
        "reason": "does not follow conventional commit format",
    }


def test_title_record_field_names() -> None:
    record = InvalidTitleRecord(title="Update", reason="nope")
    assert record.model_dump() == {"title": "Update", "reason": "nope"}


def test_commit_record_rejects_blank_hash() -> None:
    with pytest.raises(ValidationError):
        InvalidCommitRecord(hash="  ", message="wip", reason="x")


def test_record_rejects_extra_fields() -> None:
    with pytest.raises(ValidationError):
        InvalidTitleRecord(title="x", reason="y", hash="z")  # type: ignore[call-arg]


def test_report_rejects_unknown_source() -> None:
    with pytest.raises(ValidationError):
        VerdictReport(valid=True, total=0, source="push", invalid=[])  # type: ignore[arg-type]


def test_report_strict_types() -> None:
    with pytest.raises(ValidationError):
        VerdictReport(valid="yes", total=0, source="title", invalid=[])  # type: ignore[arg-type]


def test_invalid_json_is_array_of_records() -> None:
    report = VerdictReport(
        valid=False,
        total=2,
        source="commits",
        invalid=[InvalidCommitRecord(hash="abc", message="wip", reason="r")],
    )
    assert json.loads(report.invalid_json()) == [{"hash": "abc", "message": "wip", "reason": "r"}]
