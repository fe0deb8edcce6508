"""Organisation repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.organisation import Organisation


class OrganisationRepository(Protocol):
    def get_by_owner(self, user_id: int) -> Optional[Organisation]:
        """Return the organisation created by the given admin."""
        ...

    def create(self, organisation: Organisation) -> Organisation:
        ...

    def update(self, organisation: Organisation) -> Organisation:
        ...
