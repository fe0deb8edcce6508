"""Forms for beneficiary onboarding and review."""

from __future__ import annotations

from typing import ClassVar

from ...models.beneficiary import BENEFICIARY_STATUSES, RISK_LEVELS
from ..forms import PayloadForm


class BeneficiaryForm(PayloadForm):
    """Onboarding payload; with ``partial=True`` it also covers profile edits."""

    FIELDS: ClassVar[dict[str, str]] = {
        "campaignId": "campaign_id",
        "fullName": "full_name",
        "email": "email",
        "gender": "gender",
        "age": "age",
        "district": "district",
        "locality": "locality",
        "phone": "phone",
        "idType": "id_type",
        "idNumber": "id_number",
        "riskLevel": "risk_level",
        "internalNotes": "internal_notes",
    }

    def clean(self) -> None:
        self._number("campaignId", required=not self.partial, integer=True, minimum=1)
        self._text("fullName", required=True, max_length=128)
        self._email("email", required=not self.partial)
        self._text("gender", max_length=16)
        self._number("age", integer=True, minimum=0)
        self._text("district", max_length=128)
        self._text("locality", max_length=128)
        self._text("phone", max_length=32)
        self._text("idType", max_length=32)
        self._text("idNumber", max_length=64)
        self._choice("riskLevel", RISK_LEVELS)
        self._text("internalNotes", max_length=4000)


class BeneficiaryReviewForm(BeneficiaryForm):
    """PATCH payload: profile edits plus an optional status decision and note."""

    FIELDS: ClassVar[dict[str, str]] = {
        **BeneficiaryForm.FIELDS,
        "status": "status",
        "details": "details",
    }

    def clean(self) -> None:
        super().clean()
        # Campaign and login email are fixed once onboarded.
        for key in ("campaign_id", "email"):
            self.cleaned.pop(key, None)
        self._choice("status", BENEFICIARY_STATUSES)
        self._text("details", max_length=255)
