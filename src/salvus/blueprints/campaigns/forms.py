"""Forms for campaign administration."""

from __future__ import annotations

from typing import ClassVar

from ...models.campaign import CAMPAIGN_STATUSES, URGENCY_LEVELS
from ..forms import PayloadForm


class CampaignForm(PayloadForm):
    """Campaign create/update payload."""

    FIELDS: ClassVar[dict[str, str]] = {
        "name": "name",
        "location": "location",
        "stateRegion": "state_region",
        "district": "district",
        "disasterType": "disaster_type",
        "description": "description",
        "urgency": "urgency",
        "totalFundsAllocated": "total_funds_allocated",
        "beneficiaryCap": "beneficiary_cap",
        "startDate": "start_date",
        "endDate": "end_date",
        "categories": "categories",
        "categoryMaxLimits": "category_max_limits",
    }

    def clean(self) -> None:
        self._text("name", required=True, max_length=120)
        self._text("location", required=True)
        self._text("stateRegion", required=True)
        self._text("district")
        self._text("disasterType", required=True)
        self._text("description", required=True, max_length=4000)
        self._choice("urgency", URGENCY_LEVELS)
        self._number("totalFundsAllocated", required=True, minimum=0)
        self._number("beneficiaryCap", required=True)
        self._date("startDate", required=True)
        self._date("endDate", required=True)
        self._string_list("categories")
        self._mapping("categoryMaxLimits")


class CampaignStatusForm(PayloadForm):
    FIELDS: ClassVar[dict[str, str]] = {"status": "status"}

    def clean(self) -> None:
        self._choice("status", CAMPAIGN_STATUSES, required=True)
