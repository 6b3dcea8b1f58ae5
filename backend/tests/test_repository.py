from __future__ import annotations
from datetime import timezone
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from gateway.db import Base
from gateway.errors import NotFoundError
from gateway.schemas.submission import StoredFile
from gateway.services.repository import InMemorySubmissionRepository, NewSubmission, SqlSubmissionRepository
from factories import StepClock
import gateway.models.submission  # noqa: F401  registers the table


def _new(submission_id: str, **overrides) -> NewSubmission:
    data = dict(
        id=submission_id,
        name="Alice",
        email="a@x.com",
        project_title="Website Revamp",
        project_description="A full redesign of our marketing website.",
    )
    data.update(overrides)
    return NewSubmission(**data)


@pytest_asyncio.fixture(params=["memory", "sql"])
async def repo(request):
    if request.param == "memory":
        yield InMemorySubmissionRepository(clock=StepClock())
        return
    engine = create_async_engine(
        "sqlite+aiosqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield SqlSubmissionRepository(async_sessionmaker(engine, expire_on_commit=False), clock=StepClock())
    await engine.dispose()


@pytest.mark.asyncio
async def test_create_forces_pending(repo):
    record = await repo.create(_new("s1"))
    assert record.status == "pending"
    assert record.acceptance_conditions is None and record.rejection_reason is None
    assert record.submitted_at.tzinfo is not None
    assert record.updated_at is None


@pytest.mark.asyncio
async def test_list_is_newest_first(repo):
    for i in range(4):
        await repo.create(_new(f"s{i}"))
    listed = await repo.list()
    assert [r.id for r in listed] == ["s3", "s2", "s1", "s0"]
    stamps = [r.submitted_at for r in listed]
    assert all(a > b for a, b in zip(stamps, stamps[1:]))


@pytest.mark.asyncio
async def test_files_round_trip(repo):
    brief = StoredFile(name="brief.pdf", size=2048, type="application/pdf", url="http://files.test/b", path="submissions/s1/1_brief.pdf")
    await repo.create(_new("s1", files=[brief]))
    got = await repo.get("s1")
    assert got.files == [brief]


@pytest.mark.asyncio
async def test_get_missing_returns_none(repo):
    assert await repo.get("nope") is None


@pytest.mark.asyncio
async def test_update_writes_only_given_fields(repo):
    await repo.create(_new("s1"))
    await repo.update_status("s1", {"status": "acceptedWithConditions", "acceptance_conditions": "50% upfront"})
    # a later write that omits the conditions must not wipe them
    await repo.update_status("s1", {"status": "acceptedWithConditions"})
    got = await repo.get("s1")
    assert got.acceptance_conditions == "50% upfront"
    assert got.updated_at is not None and got.updated_at.tzinfo == timezone.utc

    cleared = await repo.update_status("s1", {"status": "rejected", "acceptance_conditions": None, "rejection_reason": "Budget"})
    assert cleared.acceptance_conditions is None
    assert cleared.rejection_reason == "Budget"
    assert cleared.updated_at > got.updated_at


@pytest.mark.asyncio
async def test_update_rejects_non_status_fields(repo):
    await repo.create(_new("s1"))
    with pytest.raises(ValueError):
        await repo.update_status("s1", {"email": "b@x.com"})


@pytest.mark.asyncio
async def test_update_missing_raises_not_found(repo):
    with pytest.raises(NotFoundError):
        await repo.update_status("nope", {"status": "accepted"})


@pytest.mark.asyncio
async def test_delete(repo):
    await repo.create(_new("s1"))
    assert await repo.delete("s1") is True
    assert await repo.get("s1") is None
    assert await repo.delete("s1") is False
