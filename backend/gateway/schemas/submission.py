from __future__ import annotations
import re
from datetime import datetime
from typing import Literal
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

SubmissionStatus = Literal["pending", "accepted", "acceptedWithConditions", "rejected"]
StatusFilter = Literal["pending", "accepted", "acceptedWithConditions", "rejected", "all"]

PHONE_RE = re.compile(r"^[+]?[0-9\s\-()]{7,20}$")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StoredFile(CamelModel):
    name: str
    size: int
    type: str
    # exactly one of content (inline data URI) / url (object storage)
    content: str | None = None
    url: str | None = None
    path: str | None = None


class SubmissionForm(CamelModel):
    """Public intake form fields, before attachments are considered."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(min_length=2, max_length=200)
    email: EmailStr
    phone: str | None = None
    project_title: str = Field(min_length=5, max_length=200)
    project_description: str = Field(min_length=20, max_length=5000)

    @field_validator("phone", mode="before")
    @classmethod
    def _blank_phone_is_absent(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("phone")
    @classmethod
    def _phone_format(cls, v: str | None) -> str | None:
        if v is not None and not PHONE_RE.match(v):
            raise ValueError("invalid phone")
        return v


class SubmissionRecord(CamelModel):
    id: str
    name: str
    email: str
    phone: str | None = None
    project_title: str
    project_description: str
    files: list[StoredFile] = Field(default_factory=list)
    status: SubmissionStatus = "pending"
    acceptance_conditions: str | None = None
    rejection_reason: str | None = None
    submitted_at: datetime
    updated_at: datetime | None = None


class FieldErrorOut(BaseModel):
    field: str
    message: str


class ActionResult(CamelModel):
    success: bool
    message: str
    submission_id: str | None = None
    reason: Literal["validation", "not_found", "persistence", "invalid_transition", "storage"] | None = None
    errors: list[FieldErrorOut] | None = None
    warnings: list[str] | None = None
    submission: SubmissionRecord | None = None
    submissions: list[SubmissionRecord] | None = None


class ConditionsRequest(BaseModel):
    conditions: str = ""


class RejectRequest(BaseModel):
    reason: str = ""
