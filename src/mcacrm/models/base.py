"""Columns shared by every CRM table."""
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecordBase(SQLModel):
    """Primary key, soft-delete flag and audit timestamps (timezone-aware UTC)."""

    id: Optional[int] = Field(default=None, primary_key=True)
    inactive: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
