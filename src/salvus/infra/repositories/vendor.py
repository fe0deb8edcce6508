"""SQLModel implementation of Vendor repository."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import func
from sqlmodel import select

from ...models.vendor import Vendor
from ..database import SessionFactory


class SQLModelVendorRepository:
    """SQLModel-based vendor repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def _first(self, statement) -> Optional[Vendor]:
        with self.session_factory() as session:
            obj = session.exec(statement).first()
            if obj:
                session.expunge(obj)
            return obj

    def get_by_id(self, vendor_id: int) -> Optional[Vendor]:
        return self._first(select(Vendor).where(Vendor.id == vendor_id))

    def get_for_user(self, user_id: int) -> Optional[Vendor]:
        return self._first(select(Vendor).where(Vendor.user_id == user_id))

    def find_for_admin(self, identifier: str, *, admin_id: int) -> Optional[Vendor]:
        """Look up by numeric id, then by store code, among the admin's vendors."""
        identifier = identifier.strip()
        found = None
        if identifier.isdigit():
            found = self._first(
                select(Vendor).where(Vendor.id == int(identifier)).where(Vendor.created_by == admin_id)
            )
        if found is None:
            found = self._first(
                select(Vendor)
                .where(Vendor.store_code == identifier)
                .where(Vendor.created_by == admin_id)
            )
        return found

    def approved_names(self, campaign_id: int) -> list[str]:
        """Names of approved vendors serving a campaign."""
        with self.session_factory() as session:
            statement = (
                select(Vendor.name)
                .where(Vendor.campaign_id == campaign_id)
                .where(Vendor.status == "Approved")
                .order_by(Vendor.name)
            )
            return list(session.exec(statement).all())

    def list_for_campaign(self, campaign_id: int, *, limit: int = 50) -> list[Vendor]:
        with self.session_factory() as session:
            statement = (
                select(Vendor)
                .where(Vendor.campaign_id == campaign_id)
                .order_by(Vendor.created_at.desc())  # type: ignore
                .limit(limit)
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def count_for_campaign(self, campaign_id: int) -> int:
        with self.session_factory() as session:
            return int(
                session.exec(
                    select(func.count()).select_from(Vendor).where(Vendor.campaign_id == campaign_id)
                ).one()
            )

    def code_exists(self, code: str) -> bool:
        with self.session_factory() as session:
            return session.exec(select(Vendor.id).where(Vendor.store_code == code)).first() is not None

    def update(self, vendor: Vendor) -> Vendor:
        """Persist changes to an existing vendor."""
        with self.session_factory() as session:
            vendor = session.merge(vendor)
            session.commit()
            session.refresh(vendor)
            session.expunge(vendor)
            return vendor
