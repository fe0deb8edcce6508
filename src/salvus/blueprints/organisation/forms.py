"""Form for the admin's organisation profile."""

from __future__ import annotations

from typing import ClassVar

from ...models.organisation import ORGANISATION_TYPES
from ..forms import PayloadForm


class OrganisationForm(PayloadForm):
    FIELDS: ClassVar[dict[str, str]] = {
        "name": "name",
        "type": "type",
        "officialEmail": "official_email",
        "contactPersonName": "contact_person_name",
        "contactPhone": "contact_phone",
        "address": "address",
        "website": "website",
    }

    def clean(self) -> None:
        self._text("name", required=True, max_length=128)
        self._choice("type", ORGANISATION_TYPES, required=True)
        self._email("officialEmail", required=True)
        self._text("contactPersonName", required=True, max_length=128)
        self._text("contactPhone", required=True, max_length=32)
        self._text("address", required=True)
        self._text("website")
