"""The admin's own relief organisation profile."""

from __future__ import annotations

from typing import Any, Mapping

from ..domain.repositories import OrganisationRepository
from ..errors import NotFoundError, ValidationError
from ..infra.database import SessionFactory
from ..infra.repositories import SQLModelOrganisationRepository
from ..logging_config import get_logger
from ..models.organisation import ORGANISATION_TYPES, Organisation
from .auth import Principal

logger = get_logger(__name__)

PROFILE_FIELDS = (
    "name",
    "type",
    "official_email",
    "contact_person_name",
    "contact_phone",
    "address",
    "website",
)


def get_organisation(*, actor: Principal, session_factory: SessionFactory) -> Organisation:
    organisation = SQLModelOrganisationRepository(session_factory).get_by_owner(actor.user_id)
    if organisation is None:
        raise NotFoundError()
    return organisation


def save_organisation(
    fields: Mapping[str, Any], *, actor: Principal, session_factory: SessionFactory
) -> Organisation:
    """Create the admin's organisation, or overwrite its profile when one exists."""

    return upsert_organisation(
        fields, owner_id=actor.user_id, repository=SQLModelOrganisationRepository(session_factory)
    )


def upsert_organisation(
    fields: Mapping[str, Any], *, owner_id: int, repository: OrganisationRepository
) -> Organisation:
    if fields.get("type") is not None and fields["type"] not in ORGANISATION_TYPES:
        raise ValidationError(f"Unknown organisation type: {fields['type']}")

    existing = repository.get_by_owner(owner_id)
    if existing is None:
        organisation = repository.create(
            Organisation(
                created_by=owner_id,
                **{name: fields[name] for name in PROFILE_FIELDS if name in fields},
            )
        )
        logger.info(
            "Organisation created", extra={"organisation_id": organisation.id, "owner": owner_id}
        )
        return organisation

    for name in PROFILE_FIELDS:
        if name in fields:
            setattr(existing, name, fields[name])
    # Website is optional; leaving it out clears it.
    if "website" not in fields:
        existing.website = None
    organisation = repository.update(existing)
    logger.info(
        "Organisation updated", extra={"organisation_id": organisation.id, "owner": owner_id}
    )
    return organisation


def serialize_organisation(organisation: Organisation) -> dict[str, Any]:
    return {
        "id": organisation.id,
        "name": organisation.name,
        "type": organisation.type,
        "officialEmail": organisation.official_email,
        "contactPersonName": organisation.contact_person_name,
        "contactPhone": organisation.contact_phone,
        "address": organisation.address,
        "website": organisation.website,
        "createdAt": organisation.created_at.isoformat() if organisation.created_at else None,
    }
