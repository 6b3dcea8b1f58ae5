from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence
from pydantic import ValidationError as PydanticValidationError
from gateway.errors import FieldError, ValidationError
from gateway.schemas.submission import SubmissionForm

ALLOWED_FILE_TYPES = {
    "image/jpeg",
    "image/png",
    "image/webp",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
}

# Messages shown to the submitter, keyed by form field (camelCase, as posted)
FIELD_MESSAGES = {
    "name": "Name must be between 2 and 200 characters long.",
    "email": "Please enter a valid email address.",
    "phone": "Please enter a valid phone number.",
    "projectTitle": "Project title must be between 5 and 200 characters long.",
    "projectDescription": "Project description must be between 20 and 5000 characters long.",
}


@dataclass(frozen=True)
class IncomingFile:
    name: str
    type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class UploadLimits:
    max_files: int
    max_file_bytes: int


@dataclass
class ValidationOutcome:
    form: SubmissionForm | None = None
    files: list[IncomingFile] = field(default_factory=list)
    errors: list[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _human_size(n: int) -> str:
    if n >= 1024 * 1024:
        return f"{n // (1024 * 1024)}MB"
    return f"{n // 1024}KB"


def _form_errors(exc: PydanticValidationError) -> list[FieldError]:
    out: list[FieldError] = []
    seen: set[str] = set()
    for err in exc.errors():
        loc = str(err["loc"][0]) if err["loc"] else "form"
        if loc in seen:
            continue
        seen.add(loc)
        out.append(FieldError(loc, FIELD_MESSAGES.get(loc, err["msg"])))
    return out


def check_files(files: Sequence[IncomingFile], limits: UploadLimits) -> list[FieldError]:
    errors: list[FieldError] = []
    if len(files) > limits.max_files:
        errors.append(FieldError("files", f"You can upload at most {limits.max_files} files."))
    for i, f in enumerate(files):
        if f.size > limits.max_file_bytes:
            errors.append(FieldError(f"files[{i}]", f"{f.name}: file size should be at most {_human_size(limits.max_file_bytes)}."))
        if f.type not in ALLOWED_FILE_TYPES:
            errors.append(FieldError(
                f"files[{i}]",
                f"{f.name}: only .jpg, .jpeg, .png, .webp, .pdf, .doc, .docx, .txt files are allowed.",
            ))
    return errors


def validate_submission(
    fields: Mapping[str, Any], files: Sequence[IncomingFile], limits: UploadLimits
) -> ValidationOutcome:
    """
    Validate a candidate submission.

    Returns the normalized form and attachments, or every field-scoped error found.
    Form and file rules are both evaluated so the caller can surface all problems at once.
    """
    outcome = ValidationOutcome(files=list(files))
    try:
        outcome.form = SubmissionForm.model_validate(dict(fields))
    except PydanticValidationError as e:
        outcome.errors.extend(_form_errors(e))
    outcome.errors.extend(check_files(outcome.files, limits))
    if outcome.errors:
        outcome.form = None
    return outcome


def require_note(field_name: str, value: str | None, label: str) -> str:
    """Return the trimmed note, or raise ValidationError when it is empty or whitespace."""
    text = (value or "").strip()
    if not text:
        raise ValidationError([FieldError(field_name, f"{label} cannot be empty.")])
    return text
