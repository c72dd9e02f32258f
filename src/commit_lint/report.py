from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import Optional

from commit_lint.policy import ValidationVerdict
from shared.constants import MAX_STATUS_DESCRIPTION_LENGTH
from shared.logging import ContextAdapter
from shared.schema import InvalidCommitRecord, InvalidRecord, InvalidTitleRecord, SourceKind, VerdictReport

FORMAT_HINT = "Expected format: type(scope)!: subject"


def build_report(verdict: ValidationVerdict, source: SourceKind) -> VerdictReport:
    invalid: list[InvalidRecord] = []
    for entry in verdict.invalid:
        if source == "title":
            invalid.append(InvalidTitleRecord(title=entry.header, reason=entry.reason))
        else:
            invalid.append(InvalidCommitRecord(hash=entry.identifier, message=entry.header, reason=entry.reason))
    return VerdictReport(valid=verdict.all_valid, total=verdict.total, source=source, invalid=invalid)


def action_outputs(report: VerdictReport) -> dict[str, str]:
    return {
        "valid": "true" if report.valid else "false",
        "total-commits": str(report.total),
        "invalid-commits": report.invalid_json(),
    }


def write_action_outputs(outputs: dict[str, str], output_path: Optional[str] = None) -> None:
    """Append outputs to the ``$GITHUB_OUTPUT`` file using heredoc delimiters.

    Outside of Actions (no output file) the outputs are dropped.
    """
    output_path = output_path if output_path is not None else os.getenv("GITHUB_OUTPUT", "")
    if not output_path:
        return

    with Path(output_path).open("a", encoding="utf-8") as handle:
        for name, value in outputs.items():
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            handle.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")


def _escape_command_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def workflow_command(command: str, message: str) -> str:
    return f"::{command}::{_escape_command_data(message)}"


def annotation_lines(report: VerdictReport) -> list[str]:
    lines: list[str] = []
    for record in report.invalid:
        if isinstance(record, InvalidTitleRecord):
            lines.append(workflow_command("error", f'PR title "{record.title}": {record.reason}'))
        else:
            lines.append(workflow_command("error", f"{record.hash[:8]} `{record.message}`: {record.reason}"))
    if not report.valid:
        lines.append(workflow_command("error", f"Conventional commit validation failed. {FORMAT_HINT}"))
    return lines


def log_verdict(logger: ContextAdapter, report: VerdictReport) -> None:
    for record in report.invalid:
        logger.warning("message_invalid", extra={"extra": record.model_dump()})
    event = "validation_passed" if report.valid else "validation_failed"
    logger.info(
        event,
        extra={"extra": {"total": report.total, "invalid_count": len(report.invalid), "source": report.source}},
    )


def status_description(report: VerdictReport) -> str:
    if report.valid:
        noun = "title" if report.source == "title" else f"{report.total} commit(s)"
        text = f"Conventional commit check passed for {noun}"
    elif report.source == "title":
        text = f"PR title: {report.invalid[0].reason}"
    else:
        text = f"{len(report.invalid)} of {report.total} commit(s) are not conventional"
    if len(text) > MAX_STATUS_DESCRIPTION_LENGTH:
        text = text[: MAX_STATUS_DESCRIPTION_LENGTH - 3] + "..."
    return text
