"""Wire contract for validation reports.

Field names here are consumed by existing workflows (``invalid-commits``
output, webhook response bodies) and must not be renamed.
"""

import json
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, field_validator


class InvalidCommitRecord(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    hash: str
    message: str
    reason: str

    @field_validator("hash")
    @classmethod
    def validate_hash(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("hash cannot be empty")
        return value


class InvalidTitleRecord(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    title: str
    reason: str


InvalidRecord = Union[InvalidCommitRecord, InvalidTitleRecord]

SourceKind = Literal["title", "commits"]


class VerdictReport(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    valid: bool
    total: int
    source: SourceKind
    invalid: list[InvalidRecord]

    def invalid_json(self) -> str:
        """Serialize ``invalid`` the way the ``invalid-commits`` output carries it."""
        return json.dumps([record.model_dump() for record in self.invalid])
