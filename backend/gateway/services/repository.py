from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Protocol
import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from gateway.errors import NotFoundError, PersistenceError
from gateway.models.submission import Submission
from gateway.schemas.submission import StoredFile, SubmissionRecord

log = structlog.get_logger()

# Columns a status change may touch
STATUS_FIELDS = ("status", "acceptance_conditions", "rejection_reason")

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime | None) -> datetime | None:
    # Some drivers (sqlite) hand back naive datetimes; everything is stored as UTC
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass
class NewSubmission:
    id: str
    name: str
    email: str
    project_title: str
    project_description: str
    phone: str | None = None
    files: list[StoredFile] = field(default_factory=list)


class SubmissionRepository(Protocol):
    async def create(self, new: NewSubmission) -> SubmissionRecord: ...

    async def list(self) -> list[SubmissionRecord]: ...

    async def get(self, submission_id: str) -> SubmissionRecord | None: ...

    async def update_status(self, submission_id: str, fields: dict[str, Any]) -> SubmissionRecord: ...

    async def delete(self, submission_id: str) -> bool: ...


def _check_status_fields(fields: dict[str, Any]) -> None:
    unknown = set(fields) - set(STATUS_FIELDS)
    if unknown:
        raise ValueError(f"not a status field: {', '.join(sorted(unknown))}")


def newest_first(records: list[SubmissionRecord]) -> list[SubmissionRecord]:
    return sorted(records, key=lambda r: r.submitted_at, reverse=True)


class InMemorySubmissionRepository:
    """Dict-backed store for local runs and tests."""

    def __init__(self, clock: Clock = utcnow):
        self._rows: dict[str, SubmissionRecord] = {}
        self._clock = clock

    async def create(self, new: NewSubmission) -> SubmissionRecord:
        if new.id in self._rows:
            raise PersistenceError(f"duplicate submission id {new.id}")
        record = SubmissionRecord(
            id=new.id,
            name=new.name,
            email=new.email,
            phone=new.phone,
            project_title=new.project_title,
            project_description=new.project_description,
            files=list(new.files),
            status="pending",
            submitted_at=as_utc(self._clock()),
        )
        self._rows[record.id] = record
        return record

    async def list(self) -> list[SubmissionRecord]:
        return newest_first(list(self._rows.values()))

    async def get(self, submission_id: str) -> SubmissionRecord | None:
        return self._rows.get(submission_id)

    async def update_status(self, submission_id: str, fields: dict[str, Any]) -> SubmissionRecord:
        _check_status_fields(fields)
        current = self._rows.get(submission_id)
        if current is None:
            raise NotFoundError(submission_id)
        updated = current.model_copy(update={**fields, "updated_at": as_utc(self._clock())})
        self._rows[submission_id] = updated
        return updated

    async def delete(self, submission_id: str) -> bool:
        return self._rows.pop(submission_id, None) is not None


def _to_record(row: Submission) -> SubmissionRecord:
    return SubmissionRecord(
        id=row.id,
        name=row.name,
        email=row.email,
        phone=row.phone,
        project_title=row.project_title,
        project_description=row.project_description,
        files=[StoredFile.model_validate(f) for f in (row.files or [])],
        status=row.status,
        acceptance_conditions=row.acceptance_conditions,
        rejection_reason=row.rejection_reason,
        submitted_at=as_utc(row.submitted_at),
        updated_at=as_utc(row.updated_at),
    )


class SqlSubmissionRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession], clock: Clock = utcnow):
        self._session_factory = session_factory
        self._clock = clock

    async def create(self, new: NewSubmission) -> SubmissionRecord:
        row = Submission(
            id=new.id,
            name=new.name,
            email=new.email,
            phone=new.phone,
            project_title=new.project_title,
            project_description=new.project_description,
            files=[f.model_dump(exclude_none=True) for f in new.files],
            status="pending",
            submitted_at=self._clock(),
        )
        try:
            async with self._session_factory() as session:
                session.add(row)
                await session.commit()
        except SQLAlchemyError as e:
            log.error("submission_write_failed", submission_id=new.id, error=str(e))
            raise PersistenceError("could not save submission") from e
        return _to_record(row)

    async def list(self) -> list[SubmissionRecord]:
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(
                    select(Submission).order_by(Submission.submitted_at.desc())
                )).scalars().all()
        except SQLAlchemyError as e:
            log.error("submission_list_failed", error=str(e))
            raise PersistenceError("could not load submissions") from e
        return [_to_record(r) for r in rows]

    async def get(self, submission_id: str) -> SubmissionRecord | None:
        try:
            async with self._session_factory() as session:
                row = await session.get(Submission, submission_id)
        except SQLAlchemyError as e:
            log.error("submission_read_failed", submission_id=submission_id, error=str(e))
            raise PersistenceError("could not load submission") from e
        return _to_record(row) if row else None

    async def update_status(self, submission_id: str, fields: dict[str, Any]) -> SubmissionRecord:
        _check_status_fields(fields)
        try:
            async with self._session_factory() as session:
                row = await session.get(Submission, submission_id)
                if row is None:
                    raise NotFoundError(submission_id)
                # Only keys present are written; None clears the column
                for key, value in fields.items():
                    setattr(row, key, value)
                row.updated_at = self._clock()
                await session.commit()
        except SQLAlchemyError as e:
            log.error("submission_update_failed", submission_id=submission_id, error=str(e))
            raise PersistenceError("could not update submission") from e
        return _to_record(row)

    async def delete(self, submission_id: str) -> bool:
        try:
            async with self._session_factory() as session:
                row = await session.get(Submission, submission_id)
                if row is None:
                    return False
                await session.delete(row)
                await session.commit()
        except SQLAlchemyError as e:
            log.error("submission_delete_failed", submission_id=submission_id, error=str(e))
            raise PersistenceError("could not delete submission") from e
        return True
