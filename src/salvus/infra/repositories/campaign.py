"""SQLModel implementation of Campaign repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import select

from ...models.campaign import Campaign
from ..database import SessionFactory


class SQLModelCampaignRepository:
    """SQLModel-based campaign repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, campaign_id: int) -> Optional[Campaign]:
        """Retrieve a campaign by ID."""
        with self.session_factory() as session:
            obj = session.get(Campaign, campaign_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_for_admin(self, admin_id: int) -> list[Campaign]:
        """Campaigns created by an admin, newest first."""
        with self.session_factory() as session:
            statement = (
                select(Campaign)
                .where(Campaign.created_by == admin_id)
                .order_by(Campaign.created_at.desc())  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_by_status(self, status: str) -> list[Campaign]:
        """Campaigns in the given status, newest first."""
        with self.session_factory() as session:
            statement = (
                select(Campaign)
                .where(Campaign.status == status)
                .order_by(Campaign.created_at.desc())  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def slug_exists(self, slug: str) -> bool:
        with self.session_factory() as session:
            return session.exec(select(Campaign.id).where(Campaign.slug == slug)).first() is not None

    def create(self, campaign: Campaign) -> Campaign:
        """Create a new campaign."""
        with self.session_factory() as session:
            session.add(campaign)
            session.commit()
            session.refresh(campaign)
            session.expunge(campaign)
            return campaign

    def update(self, campaign: Campaign) -> Campaign:
        """Persist changes to an existing campaign."""
        with self.session_factory() as session:
            campaign = session.merge(campaign)
            session.commit()
            session.refresh(campaign)
            session.expunge(campaign)
            return campaign
