"""SQLModel implementation of Transaction repository."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import selectinload
from sqlmodel import select

from ...models.transaction import SETTLED_STATUSES, Transaction
from ..database import SessionFactory


class SQLModelTransactionRepository:
    """SQLModel-based transaction repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def list_for_beneficiary(
        self, beneficiary_id: int, *, limit: Optional[int] = None
    ) -> list[Transaction]:
        """Transactions for a beneficiary, most recent first, vendor populated."""
        with self.session_factory() as session:
            statement = (
                select(Transaction)
                .options(selectinload(Transaction.vendor))  # type: ignore[arg-type]
                .where(Transaction.beneficiary_id == beneficiary_id)
                .order_by(Transaction.timestamp.desc(), Transaction.id.desc())  # type: ignore
            )
            if limit is not None:
                statement = statement.limit(limit)
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def settled_total_for_campaign(self, campaign_id: int) -> float:
        """Sum of completed or paid transaction amounts for a campaign."""
        with self.session_factory() as session:
            total = session.exec(
                select(func.coalesce(func.sum(Transaction.amount), 0.0))
                .where(Transaction.campaign_id == campaign_id)
                .where(Transaction.status.in_(SETTLED_STATUSES))  # type: ignore[union-attr]
            ).one()
            return round(float(total or 0.0), 2)

    def create(self, transaction: Transaction) -> Transaction:
        """Create a new transaction."""
        with self.session_factory() as session:
            session.add(transaction)
            session.commit()
            session.refresh(transaction)
            session.expunge(transaction)
            return transaction
