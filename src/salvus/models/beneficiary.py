"""Beneficiaries and their activity trail."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from .base import utcnow

BENEFICIARY_STATUSES = ("Pending", "Approved", "Suspended")
RISK_LEVELS = ("Low", "Medium", "High")


class Beneficiary(SQLModel, table=True):
    """An individual approved to spend campaign funds within category limits."""

    __tablename__: ClassVar[str] = "beneficiary"

    id: Optional[int] = Field(default=None, primary_key=True)
    beneficiary_code: str = Field(nullable=False, unique=True, index=True, max_length=16)
    campaign_id: int = Field(foreign_key="campaign.id", nullable=False, index=True)
    user_id: Optional[int] = Field(default=None, foreign_key="user.id", index=True)
    created_by: int = Field(foreign_key="user.id", nullable=False, index=True)
    full_name: str = Field(nullable=False, max_length=128)
    gender: Optional[str] = Field(default=None, max_length=16)
    age: Optional[int] = Field(default=None)
    district: Optional[str] = Field(default=None, max_length=128)
    locality: Optional[str] = Field(default=None, max_length=128)
    phone: Optional[str] = Field(default=None, max_length=32)
    email: Optional[str] = Field(default=None, max_length=255)
    id_type: Optional[str] = Field(default=None, max_length=32)
    id_number: Optional[str] = Field(default=None, max_length=64)
    status: str = Field(default="Pending", nullable=False, max_length=16, index=True)
    risk_level: str = Field(default="Low", max_length=8)
    internal_notes: str = Field(default="")
    created_at: datetime = Field(default_factory=utcnow, nullable=False)

    activity: list["BeneficiaryActivity"] = Relationship(
        back_populates="beneficiary",
        sa_relationship=relationship(
            "BeneficiaryActivity",
            back_populates="beneficiary",
            order_by="BeneficiaryActivity.timestamp",
            cascade="all, delete-orphan",
        ),
    )


class BeneficiaryActivity(SQLModel, table=True):
    """Append-only log entry recorded against a beneficiary."""

    __tablename__: ClassVar[str] = "beneficiary_activity"

    id: Optional[int] = Field(default=None, primary_key=True)
    beneficiary_id: int = Field(foreign_key="beneficiary.id", nullable=False, index=True)
    action: str = Field(nullable=False, max_length=32)
    details: str = Field(default="", max_length=255)
    timestamp: datetime = Field(default_factory=utcnow, nullable=False)

    beneficiary: "Beneficiary" = Relationship(
        back_populates="activity",
        sa_relationship=relationship("Beneficiary", back_populates="activity"),
    )
