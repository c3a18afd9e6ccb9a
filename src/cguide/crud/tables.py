"""Database table definitions for the guidelines document and its published history"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column, DateTime, String
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Naive UTC timestamp (columns are stored without a timezone)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class GuidelinesRecord(SQLModel, table=True):
    """The site's guidelines entity: published content plus an optional working draft"""
    __tablename__ = "guidelines"
    id: Optional[int] = Field(default=None, primary_key=True)
    active: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    draft: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    hash: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=False), nullable=False))


class GuidelinesRevision(SQLModel, table=True):
    """Immutable snapshot of a published document."""
    __tablename__ = "guidelines_revisions"
    id: Optional[int] = Field(default=None, primary_key=True)
    document_id: int = Field(..., foreign_key="guidelines.id", index=True, nullable=False)
    author_id: int = Field(default=0, nullable=False)
    guidelines: Dict[str, Any] = Field(..., sa_column=Column(JSON, nullable=False))
    hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=False), nullable=False))
