"""SQLModel implementation of Beneficiary repository."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import selectinload
from sqlmodel import select

from ...models.beneficiary import Beneficiary, BeneficiaryActivity
from ..database import SessionFactory


class SQLModelBeneficiaryRepository:
    """SQLModel-based beneficiary repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def _first(self, statement) -> Optional[Beneficiary]:
        with self.session_factory() as session:
            obj = session.exec(
                statement.options(selectinload(Beneficiary.activity))  # type: ignore[arg-type]
            ).first()
            if obj:
                session.expunge_all()
            return obj

    def get_by_id(self, beneficiary_id: int) -> Optional[Beneficiary]:
        return self._first(select(Beneficiary).where(Beneficiary.id == beneficiary_id))

    def get_by_code(self, code: str) -> Optional[Beneficiary]:
        return self._first(select(Beneficiary).where(Beneficiary.beneficiary_code == code))

    def get_for_user(self, user_id: int) -> Optional[Beneficiary]:
        """Return the beneficiary linked to a login, activity loaded."""
        return self._first(select(Beneficiary).where(Beneficiary.user_id == user_id))

    def find_for_admin(self, identifier: str, *, admin_id: int) -> Optional[Beneficiary]:
        """Look up by numeric id, then by code, among records the admin created."""
        identifier = identifier.strip()
        found = None
        if identifier.isdigit():
            found = self._first(
                select(Beneficiary)
                .where(Beneficiary.id == int(identifier))
                .where(Beneficiary.created_by == admin_id)
            )
        if found is None:
            found = self._first(
                select(Beneficiary)
                .where(Beneficiary.beneficiary_code == identifier)
                .where(Beneficiary.created_by == admin_id)
            )
        return found

    def list_for_campaign(self, campaign_id: int, *, limit: int = 50) -> list[Beneficiary]:
        with self.session_factory() as session:
            statement = (
                select(Beneficiary)
                .where(Beneficiary.campaign_id == campaign_id)
                .order_by(Beneficiary.created_at.desc())  # type: ignore
                .limit(limit)
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def count_for_campaign(self, campaign_id: int) -> int:
        with self.session_factory() as session:
            return int(
                session.exec(
                    select(func.count())
                    .select_from(Beneficiary)
                    .where(Beneficiary.campaign_id == campaign_id)
                ).one()
            )

    def code_exists(self, code: str) -> bool:
        with self.session_factory() as session:
            statement = select(Beneficiary.id).where(Beneficiary.beneficiary_code == code)
            return session.exec(statement).first() is not None

    def update(self, beneficiary: Beneficiary) -> Beneficiary:
        """Persist scalar changes; the activity log is only ever appended to."""
        with self.session_factory() as session:
            row = session.get(Beneficiary, beneficiary.id)
            if row is None:
                raise LookupError(f"Beneficiary {beneficiary.id} does not exist")
            for field_name in Beneficiary.model_fields:
                setattr(row, field_name, getattr(beneficiary, field_name))
            session.add(row)
            session.commit()
        return self.get_by_id(beneficiary.id)  # type: ignore[arg-type,return-value]

    def append_activity(
        self, beneficiary_id: int, *, action: str, details: str = ""
    ) -> BeneficiaryActivity:
        """Append an entry to the beneficiary's activity log."""
        with self.session_factory() as session:
            entry = BeneficiaryActivity(beneficiary_id=beneficiary_id, action=action, details=details)
            session.add(entry)
            session.commit()
            session.refresh(entry)
            session.expunge(entry)
            return entry
