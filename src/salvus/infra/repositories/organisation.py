"""SQLModel implementation of Organisation repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import select

from ...models.organisation import Organisation
from ..database import SessionFactory


class SQLModelOrganisationRepository:
    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_owner(self, user_id: int) -> Optional[Organisation]:
        """Return the organisation created by the given admin."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Organisation).where(Organisation.created_by == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def create(self, organisation: Organisation) -> Organisation:
        with self.session_factory() as session:
            session.add(organisation)
            session.commit()
            session.refresh(organisation)
            session.expunge(organisation)
            return organisation

    def update(self, organisation: Organisation) -> Organisation:
        with self.session_factory() as session:
            organisation = session.merge(organisation)
            session.commit()
            session.refresh(organisation)
            session.expunge(organisation)
            return organisation
