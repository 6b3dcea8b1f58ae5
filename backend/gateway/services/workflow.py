from __future__ import annotations
import uuid
from dataclasses import dataclass
from typing import Any, Literal, Mapping, Sequence
import structlog
from gateway.config import Settings
from gateway.errors import (
    FieldError,
    FileStorageError,
    InvalidTransitionError,
    NotFoundError,
    NotificationError,
    PersistenceError,
    ValidationError,
)
from gateway.schemas.submission import (
    ActionResult,
    FieldErrorOut,
    StatusFilter,
    StoredFile,
    SubmissionRecord,
    SubmissionStatus,
)
from gateway.services import email_templates
from gateway.services.files import FileStorageBackend
from gateway.services.mailer import Mailer
from gateway.services.repository import NewSubmission, SubmissionRepository
from gateway.services.validation import IncomingFile, UploadLimits, require_note, validate_submission

log = structlog.get_logger()

# Allowed status moves; nothing goes back to pending
TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"accepted", "acceptedWithConditions", "rejected"}),
    "accepted": frozenset({"rejected"}),
    "acceptedWithConditions": frozenset({"rejected"}),
    "rejected": frozenset({"rejected"}),
}

STATUS_LABELS = {
    "accepted": "accepted",
    "acceptedWithConditions": "accepted with conditions",
    "rejected": "rejected",
}

GENERIC_STORE_ERROR = "The submission store is unavailable. Please try again later."


def check_transition(current: str, target: str) -> None:
    if target not in TRANSITIONS.get(current, frozenset()):
        raise InvalidTransitionError(current, target)


def status_fields(target: SubmissionStatus, note: str | None = None) -> dict[str, Any]:
    """
    Column values for a status change. Fields that do not belong to the target
    state are set to None explicitly so stale conditions/reasons are cleared.
    """
    return {
        "status": target,
        "acceptance_conditions": note if target == "acceptedWithConditions" else None,
        "rejection_reason": note if target == "rejected" else None,
    }


def _errors_out(errors: Sequence[FieldError]) -> list[FieldErrorOut]:
    return [FieldErrorOut(field=e.field, message=e.message) for e in errors]


def _validation_failure(message: str, errors: Sequence[FieldError]) -> ActionResult:
    return ActionResult(success=False, message=message, reason="validation", errors=_errors_out(errors))


def _not_found(submission_id: str) -> ActionResult:
    return ActionResult(success=False, message="Submission not found.", reason="not_found", submission_id=submission_id)


def _store_failure(message: str = GENERIC_STORE_ERROR) -> ActionResult:
    return ActionResult(success=False, message=message, reason="persistence")


@dataclass(frozen=True)
class FileDownload:
    name: str
    type: str
    data: bytes


class SubmissionWorkflow:
    """Server-side submission operations. Every method returns an ActionResult instead of raising."""

    def __init__(self, repository: SubmissionRepository, files: FileStorageBackend, mailer: Mailer, settings: Settings):
        self.repository = repository
        self.files = files
        self.mailer = mailer
        self.settings = settings

    @property
    def limits(self) -> UploadLimits:
        return UploadLimits(max_files=self.settings.max_files, max_file_bytes=self.files.max_file_bytes)

    async def _notify(self, to: str, email: email_templates.RenderedEmail, warnings: list[str]) -> None:
        try:
            await self.mailer.send(to, email)
        except NotificationError:
            warnings.append(f"Email notification to {to} could not be sent.")

    async def _discard(self, submission_id: str, stored: Sequence[StoredFile]) -> int:
        """Best-effort removal of stored attachments; failures are logged and skipped. Returns the failure count."""
        failed = 0
        for f in stored:
            try:
                await self.files.delete(f)
            except FileStorageError as e:
                failed += 1
                log.warning("file_delete_failed", submission_id=submission_id, file=f.name, path=f.path, error=str(e))
        return failed

    async def submit(self, fields: Mapping[str, Any], uploads: Sequence[IncomingFile]) -> ActionResult:
        outcome = validate_submission(fields, uploads, self.limits)
        if not outcome.ok:
            summary = ", ".join(f"{e.field}: {e.message}" for e in outcome.errors)
            log.info("submission_rejected_invalid", fields=[e.field for e in outcome.errors])
            return _validation_failure(f"Invalid data: {summary}", outcome.errors)

        form = outcome.form
        submission_id = uuid.uuid4().hex
        stored: list[StoredFile] = []
        try:
            for upload in outcome.files:
                stored.append(await self.files.store(submission_id, upload))
        except FileStorageError as e:
            log.error("attachment_upload_failed", submission_id=submission_id, error=str(e))
            await self._discard(submission_id, stored)
            return ActionResult(success=False, message="Failed to store attachments. Please try again later.", reason="storage")

        try:
            record = await self.repository.create(NewSubmission(
                id=submission_id,
                name=form.name,
                email=str(form.email),
                phone=form.phone,
                project_title=form.project_title,
                project_description=form.project_description,
                files=stored,
            ))
        except PersistenceError as e:
            log.error("submission_create_failed", submission_id=submission_id, error=str(e))
            await self._discard(submission_id, stored)
            return _store_failure("Failed to submit project. Please try again later.")

        log.info("submission_created", submission_id=record.id, files=len(stored))

        warnings: list[str] = []
        await self._notify(
            record.email,
            email_templates.submission_confirmation(record.project_title, record.name, record.id),
            warnings,
        )
        if self.settings.admin_email:
            admin_url = f"{self.settings.admin_base_url.rstrip('/')}/admin/submissions/{record.id}"
            await self._notify(
                self.settings.admin_email,
                email_templates.admin_alert(record.project_title, record.name, record.email, record.id, admin_url),
                warnings,
            )
        return ActionResult(
            success=True,
            message="Project submitted successfully!",
            submission_id=record.id,
            submission=record,
            warnings=warnings or None,
        )

    async def list(
        self,
        status: StatusFilter = "all",
        search: str | None = None,
        order: Literal["desc", "asc"] = "desc",
    ) -> ActionResult:
        try:
            records = await self.repository.list()
        except PersistenceError:
            return _store_failure()
        if status != "all":
            records = [r for r in records if r.status == status]
        if search and search.strip():
            needle = search.strip().lower()
            records = [
                r for r in records
                if needle in r.project_title.lower() or needle in r.name.lower() or needle in r.email.lower()
            ]
        records = sorted(records, key=lambda r: r.submitted_at, reverse=(order == "desc"))
        return ActionResult(success=True, message=f"{len(records)} submission(s).", submissions=records)

    async def get(self, submission_id: str) -> ActionResult:
        try:
            record = await self.repository.get(submission_id)
        except PersistenceError:
            return _store_failure()
        if record is None:
            return _not_found(submission_id)
        return ActionResult(success=True, message="Submission found.", submission_id=record.id, submission=record)

    async def read_file(self, submission_id: str, index: int) -> FileDownload | ActionResult:
        found = await self.get(submission_id)
        if not found.success:
            return found
        files = found.submission.files
        if index < 0 or index >= len(files):
            return ActionResult(success=False, message="Attachment not found.", reason="not_found", submission_id=submission_id)
        stored = files[index]
        try:
            data, mime = await self.files.read(stored)
        except FileStorageError as e:
            log.error("attachment_read_failed", submission_id=submission_id, file=stored.name, error=str(e))
            return ActionResult(success=False, message="Attachment is not available.", reason="storage", submission_id=submission_id)
        return FileDownload(name=stored.name, type=mime or stored.type, data=data)

    async def delete(self, submission_id: str) -> ActionResult:
        """
        Delete a submission and its externally stored attachments.

        The cascade is best-effort: an attachment that cannot be removed (already
        gone, storage hiccup) is logged and skipped, and the record is still deleted.
        """
        try:
            record = await self.repository.get(submission_id)
            if record is None:
                return _not_found(submission_id)
            failed = await self._discard(submission_id, record.files)
            if not await self.repository.delete(submission_id):
                return _not_found(submission_id)
        except PersistenceError:
            return _store_failure("Failed to delete submission.")
        log.info("submission_deleted", submission_id=submission_id, files=len(record.files), file_failures=failed)
        warnings = [f"{failed} attachment(s) could not be removed from storage."] if failed else None
        return ActionResult(success=True, message="Submission deleted successfully.", submission_id=submission_id, warnings=warnings)

    async def _change_status(self, submission_id: str, target: SubmissionStatus, note: str | None = None) -> ActionResult:
        try:
            current = await self.repository.get(submission_id)
            if current is None:
                return _not_found(submission_id)
            check_transition(current.status, target)
            record = await self.repository.update_status(submission_id, status_fields(target, note))
        except InvalidTransitionError as e:
            return ActionResult(
                success=False, message=str(e.errors[0].message), reason="invalid_transition",
                submission_id=submission_id, errors=_errors_out(e.errors),
            )
        except NotFoundError:
            return _not_found(submission_id)
        except PersistenceError:
            return _store_failure("Failed to update project status.")

        log.info("submission_status_changed", submission_id=submission_id, previous=current.status, status=target)
        warnings: list[str] = []
        await self._notify(
            record.email,
            email_templates.status_update(record.project_title, record.name, target, note),
            warnings,
        )
        return ActionResult(
            success=True,
            message=f"Project {STATUS_LABELS[target]}.",
            submission_id=submission_id,
            submission=record,
            warnings=warnings or None,
        )

    async def accept(self, submission_id: str) -> ActionResult:
        return await self._change_status(submission_id, "accepted")

    async def accept_with_conditions(self, submission_id: str, conditions: str | None) -> ActionResult:
        try:
            note = require_note("conditions", conditions, "Conditions")
        except ValidationError as e:
            return _validation_failure(str(e.errors[0].message), e.errors)
        return await self._change_status(submission_id, "acceptedWithConditions", note)

    async def reject(self, submission_id: str, reason: str | None) -> ActionResult:
        try:
            note = require_note("reason", reason, "Reason")
        except ValidationError as e:
            return _validation_failure(str(e.errors[0].message), e.errors)
        return await self._change_status(submission_id, "rejected", note)
