"""Vendor repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.vendor import Vendor


class VendorRepository(Protocol):
    """Repository for campaign vendors."""

    def get_by_id(self, vendor_id: int) -> Optional[Vendor]:
        ...

    def get_for_user(self, user_id: int) -> Optional[Vendor]:
        ...

    def find_for_admin(self, identifier: str, *, admin_id: int) -> Optional[Vendor]:
        ...

    def approved_names(self, campaign_id: int) -> list[str]:
        """Names of approved vendors serving a campaign."""
        ...

    def list_for_campaign(self, campaign_id: int, *, limit: int = 50) -> list[Vendor]:
        ...

    def count_for_campaign(self, campaign_id: int) -> int:
        ...

    def code_exists(self, code: str) -> bool:
        ...

    def update(self, vendor: Vendor) -> Vendor:
        ...
