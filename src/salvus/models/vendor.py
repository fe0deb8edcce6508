"""Stores authorised to receive payments for a campaign."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from .base import utcnow

VENDOR_STATUSES = ("Pending", "Verified", "Flagged", "Approved", "Suspended")


class Vendor(SQLModel, table=True):
    __tablename__: ClassVar[str] = "vendor"

    id: Optional[int] = Field(default=None, primary_key=True)
    store_code: str = Field(nullable=False, unique=True, index=True, max_length=16)
    campaign_id: int = Field(foreign_key="campaign.id", nullable=False, index=True)
    user_id: Optional[int] = Field(default=None, foreign_key="user.id", index=True)
    created_by: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=128)
    category: str = Field(default="", max_length=64)
    district: Optional[str] = Field(default=None, max_length=128)
    area: Optional[str] = Field(default=None, max_length=128)
    phone: Optional[str] = Field(default=None, max_length=32)
    email: Optional[str] = Field(default=None, max_length=255)
    contact_person: Optional[str] = Field(default=None, max_length=128)
    authorized_categories: list[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    total_paid: float = Field(default=0.0, nullable=False)
    status: str = Field(default="Pending", nullable=False, max_length=16, index=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
