"""Beneficiary repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.beneficiary import Beneficiary, BeneficiaryActivity


class BeneficiaryRepository(Protocol):
    """Repository for beneficiaries and their activity log."""

    def get_by_id(self, beneficiary_id: int) -> Optional[Beneficiary]:
        ...

    def get_by_code(self, code: str) -> Optional[Beneficiary]:
        ...

    def get_for_user(self, user_id: int) -> Optional[Beneficiary]:
        """Return the beneficiary linked to a login, activity loaded."""
        ...

    def find_for_admin(self, identifier: str, *, admin_id: int) -> Optional[Beneficiary]:
        """Look up by numeric id or code among records the admin created."""
        ...

    def list_for_campaign(self, campaign_id: int, *, limit: int = 50) -> list[Beneficiary]:
        ...

    def count_for_campaign(self, campaign_id: int) -> int:
        ...

    def code_exists(self, code: str) -> bool:
        ...

    def update(self, beneficiary: Beneficiary) -> Beneficiary:
        ...

    def append_activity(
        self, beneficiary_id: int, *, action: str, details: str = ""
    ) -> BeneficiaryActivity:
        """Append an entry to the beneficiary's activity log."""
        ...
