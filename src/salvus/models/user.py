"""User model supporting authentication and roles."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from .base import utcnow

ROLES = ("Admin", "Beneficiary", "Vendor", "Donor")


class User(SQLModel, table=True):
    """Application user with role and credentials."""

    __tablename__: ClassVar[str] = "user"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=60)
    email: str = Field(nullable=False, unique=True, index=True, max_length=255)
    # Empty until the account holder completes password setup.
    password_hash: str = Field(default="", max_length=255)
    role: str = Field(default="Donor", nullable=False, max_length=16, index=True)
    is_verified: bool = Field(default=False, nullable=False)
    requires_password_setup: bool = Field(default=False, nullable=False)
    verification_token: Optional[str] = Field(default=None, index=True, max_length=128)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    last_login: Optional[datetime] = Field(default=None)
