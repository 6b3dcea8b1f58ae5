from __future__ import annotations
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import JSON, CheckConstraint, String, Text, DateTime, Index
from sqlalchemy.dialects.postgresql import JSONB
from gateway.db import Base


class Submission(Base):
    __tablename__ = "submissions"

    # Generated by the service before the write (uuid4 hex)
    id: Mapped[str] = mapped_column(String(32), primary_key=True)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    project_title: Mapped[str] = mapped_column(String(200), nullable=False)
    project_description: Mapped[str] = mapped_column(Text(), nullable=False)

    # [{name, size, type, content}] or [{name, size, type, url, path}]
    files: Mapped[list] = mapped_column(JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=list)

    status: Mapped[str] = mapped_column(String(32), nullable=False, default="pending")  # pending|accepted|acceptedWithConditions|rejected
    acceptance_conditions: Mapped[str | None] = mapped_column(Text(), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text(), nullable=True)

    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_submissions_submitted_at", "submitted_at"),
        Index("ix_submissions_status", "status"),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'acceptedWithConditions', 'rejected')",
            name="ck_submissions_status",
        ),
        CheckConstraint(
            "(status = 'acceptedWithConditions') = (acceptance_conditions IS NOT NULL)",
            name="ck_submissions_conditions_only_when_conditional",
        ),
        CheckConstraint(
            "(status = 'rejected') = (rejection_reason IS NOT NULL)",
            name="ck_submissions_reason_only_when_rejected",
        ),
    )
