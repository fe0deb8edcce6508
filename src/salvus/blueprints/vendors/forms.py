"""Forms for vendor onboarding and review."""

from __future__ import annotations

from typing import ClassVar

from ...models.vendor import VENDOR_STATUSES
from ..forms import PayloadForm


class VendorForm(PayloadForm):
    FIELDS: ClassVar[dict[str, str]] = {
        "campaignId": "campaign_id",
        "name": "name",
        "email": "email",
        "category": "category",
        "district": "district",
        "area": "area",
        "phone": "phone",
        "contactPerson": "contact_person",
        "authorizedCategories": "authorized_categories",
        "status": "status",
    }

    def clean(self) -> None:
        self._number("campaignId", required=not self.partial, integer=True, minimum=1)
        self._text("name", required=True, max_length=128)
        self._email("email", required=not self.partial)
        self._text("category", max_length=64)
        self._text("district", max_length=128)
        self._text("area", max_length=128)
        self._text("phone", max_length=32)
        self._text("contactPerson", max_length=128)
        self._string_list("authorizedCategories")
        if self.partial:
            self._choice("status", VENDOR_STATUSES)
            for key in ("campaign_id", "email"):
                self.cleaned.pop(key, None)
