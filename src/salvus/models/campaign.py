"""Relief campaign definitions."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, ClassVar, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from .base import utcnow

CAMPAIGN_STATUSES = ("Active", "Paused", "Closed")
URGENCY_LEVELS = ("Critical", "High", "Medium", "Low")


class Campaign(SQLModel, table=True):
    """An admin-managed relief effort with per-category spending ceilings."""

    __tablename__: ClassVar[str] = "campaign"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_by: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=128)
    slug: str = Field(default="", index=True, max_length=160)
    location: str = Field(default="", max_length=128)
    state_region: str = Field(default="", max_length=128)
    district: Optional[str] = Field(default=None, max_length=128)
    disaster_type: str = Field(default="", max_length=64)
    status: str = Field(default="Active", nullable=False, max_length=16, index=True)
    total_funds_allocated: float = Field(default=0.0, nullable=False)
    beneficiary_cap: float = Field(default=0.0, nullable=False)
    start_date: Optional[date] = Field(default=None)
    end_date: Optional[date] = Field(default=None)
    funds_raised: float = Field(default=0.0, nullable=False)
    categories: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    # Label -> ceiling. Kept loosely typed: rows written by older tooling may
    # hold anything here and readers must cope.
    category_max_limits: Optional[Any] = Field(default=None, sa_column=Column(JSON, nullable=True))
    description: str = Field(default="")
    urgency: str = Field(default="High", max_length=16)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
