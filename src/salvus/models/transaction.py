"""SQLModel definitions for purchase transactions."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from .base import utcnow

if TYPE_CHECKING:  # pragma: no cover - import guard for circular dependency
    from .vendor import Vendor

TRANSACTION_STATUSES = ("Pending", "Completed", "Failed", "Paid")
SETTLED_STATUSES = ("Completed", "Paid")


class Transaction(SQLModel, table=True):
    """A beneficiary purchase paid to a vendor out of campaign funds."""

    __tablename__: ClassVar[str] = "transaction"

    id: Optional[int] = Field(default=None, primary_key=True)
    campaign_id: int = Field(foreign_key="campaign.id", nullable=False, index=True)
    beneficiary_id: int = Field(foreign_key="beneficiary.id", nullable=False, index=True)
    vendor_id: int = Field(foreign_key="vendor.id", nullable=False, index=True)
    amount: float = Field(nullable=False, description="Non-negative amount paid to the vendor")
    category: str = Field(nullable=False, max_length=64)
    status: Optional[str] = Field(default="Completed", max_length=16)
    timestamp: datetime = Field(default_factory=utcnow, nullable=False, index=True)

    vendor: "Vendor | None" = Relationship(sa_relationship=relationship("Vendor"))
