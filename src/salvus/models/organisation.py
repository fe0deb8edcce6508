"""Relief organisations owned by an admin user."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from .base import utcnow


ORGANISATION_TYPES = ("NGO", "Govt", "Trust")


class Organisation(SQLModel, table=True):
    __tablename__: ClassVar[str] = "organisation"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_by: int = Field(foreign_key="user.id", nullable=False, unique=True, index=True)
    name: str = Field(nullable=False, max_length=128)
    type: str = Field(default="NGO", nullable=False, max_length=16)
    official_email: str = Field(default="", max_length=255)
    contact_person_name: str = Field(default="", max_length=128)
    contact_phone: str = Field(default="", max_length=32)
    address: str = Field(default="", max_length=255)
    website: Optional[str] = Field(default=None, max_length=255)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
