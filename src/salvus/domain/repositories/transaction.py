"""Transaction repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.transaction import Transaction


class TransactionRepository(Protocol):
    """Repository for purchase transactions."""

    def list_for_beneficiary(
        self, beneficiary_id: int, *, limit: Optional[int] = None
    ) -> list[Transaction]:
        """Transactions newest first, vendor populated; unbounded without ``limit``."""
        ...

    def settled_total_for_campaign(self, campaign_id: int) -> float:
        ...

    def create(self, transaction: Transaction) -> Transaction:
        ...
