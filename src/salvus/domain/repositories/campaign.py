"""Campaign repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.campaign import Campaign


class CampaignRepository(Protocol):
    """Repository for managing campaign entities."""

    def get_by_id(self, campaign_id: int) -> Optional[Campaign]:
        """Retrieve a campaign by ID."""
        ...

    def list_for_admin(self, admin_id: int) -> list[Campaign]:
        """Campaigns created by an admin, newest first."""
        ...

    def list_by_status(self, status: str) -> list[Campaign]:
        """Campaigns in the given status, newest first."""
        ...

    def slug_exists(self, slug: str) -> bool:
        ...

    def create(self, campaign: Campaign) -> Campaign:
        ...

    def update(self, campaign: Campaign) -> Campaign:
        ...
