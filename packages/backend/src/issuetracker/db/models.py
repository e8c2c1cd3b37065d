"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Relationships, constraints, and indexes defined here.
Alembic migrations are written against these models.

Key concepts:
- UUID primary keys (portable Uuid type — native on PostgreSQL, CHAR(32) on SQLite)
- Enumerated columns stored as their display strings ("In Progress"),
  constrained in Python rather than with a native PG ENUM
- Timestamps set by the application so every backend behaves the same
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from issuetracker.enums import IssuePriority, IssueSeverity, IssueStatus, enum_values


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


def _enum_column(enum_cls) -> Enum:
    return Enum(
        enum_cls,
        native_enum=False,
        length=20,
        values_callable=enum_values,
        validate_strings=True,
    )


class User(Base):
    """A registered user. Owns the issues they create.

    Learn: password_hash is a bcrypt hash; the plaintext never reaches
    the database. The unique index on email backs up the pre-insert
    uniqueness check against concurrent registrations.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    issues: Mapped[list["Issue"]] = relationship(back_populates="owner")


class Issue(Base):
    """A trackable work item.

    Learn: owner_id is set once from the authenticated caller and never
    changes. Status has no enforced transitions — any state may move to
    any other (see IssueService).
    """

    __tablename__ = "issues"
    __table_args__ = (
        Index("ix_issues_status", "status"),
        Index("ix_issues_priority", "priority"),
        Index("ix_issues_created_at", "created_at"),
        Index("ix_issues_owner_id", "owner_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[IssueStatus] = mapped_column(
        _enum_column(IssueStatus), nullable=False, default=IssueStatus.OPEN
    )
    priority: Mapped[IssuePriority] = mapped_column(
        _enum_column(IssuePriority), nullable=False
    )
    severity: Mapped[Optional[IssueSeverity]] = mapped_column(
        _enum_column(IssueSeverity), nullable=True
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    owner: Mapped["User"] = relationship(back_populates="issues")
