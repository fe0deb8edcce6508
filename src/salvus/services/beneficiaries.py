"""Beneficiary onboarding and status management."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from sqlmodel import select

from ..errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ..infra.database import SessionFactory
from ..infra.repositories import SQLModelBeneficiaryRepository, SQLModelCampaignRepository
from ..logging_config import get_logger
from ..models.beneficiary import (
    BENEFICIARY_STATUSES,
    RISK_LEVELS,
    Beneficiary,
    BeneficiaryActivity,
)
from ..models.user import User
from .auth import Principal, issue_verification_token
from .identifiers import generate_code

logger = get_logger(__name__)

PROFILE_FIELDS = (
    "full_name",
    "gender",
    "age",
    "district",
    "locality",
    "phone",
    "id_type",
    "id_number",
    "risk_level",
    "internal_notes",
)


def onboard_beneficiary(
    fields: Mapping[str, Any], *, actor: Principal, session_factory: SessionFactory
) -> Beneficiary:
    """Register a beneficiary and the passwordless login they will activate later."""

    campaign = SQLModelCampaignRepository(session_factory).get_by_id(fields["campaign_id"])
    if campaign is None:
        raise NotFoundError("Campaign not found")
    if campaign.created_by != actor.user_id:
        raise ForbiddenError("Campaign belongs to another organisation")

    repository = SQLModelBeneficiaryRepository(session_factory)
    email = fields["email"].strip().lower()
    code = generate_code("BEN", repository.code_exists)

    with session_factory() as session:
        if session.exec(select(User.id).where(User.email == email)).first() is not None:
            raise ConflictError("Email already registered in system")
        user = User(
            name=fields["full_name"],
            email=email,
            role="Beneficiary",
            is_verified=False,
            requires_password_setup=True,
        )
        session.add(user)
        session.flush()

        beneficiary = Beneficiary(
            beneficiary_code=code,
            campaign_id=campaign.id,
            user_id=user.id,
            created_by=actor.user_id,
            email=email,
            **{name: fields[name] for name in PROFILE_FIELDS if name in fields},
        )
        session.add(beneficiary)
        session.flush()
        session.add(
            BeneficiaryActivity(
                beneficiary_id=beneficiary.id,
                action="Created",
                details=f"Beneficiary onboarded by {actor.email}",
            )
        )
        session.commit()
        beneficiary_id = beneficiary.id

    logger.info(
        "Beneficiary onboarded",
        extra={"beneficiary_code": code, "campaign_id": campaign.id, "created_by": actor.user_id},
    )
    return repository.get_by_id(beneficiary_id)  # type: ignore[arg-type,return-value]


def find_beneficiary(
    identifier: str, *, actor: Principal, session_factory: SessionFactory
) -> Beneficiary:
    """Return a beneficiary the admin created, by numeric id or code."""

    beneficiary = SQLModelBeneficiaryRepository(session_factory).find_for_admin(
        identifier, admin_id=actor.user_id
    )
    if beneficiary is None:
        raise NotFoundError()
    return beneficiary


def update_beneficiary(
    identifier: str,
    fields: Mapping[str, Any],
    *,
    actor: Principal,
    session_factory: SessionFactory,
    details: Optional[str] = None,
) -> Beneficiary:
    """Apply profile edits and, when ``status`` is present, a status transition.

    A status change appends an activity entry whose action is the new status.
    """

    repository = SQLModelBeneficiaryRepository(session_factory)
    beneficiary = find_beneficiary(identifier, actor=actor, session_factory=session_factory)

    new_status = fields.get("status")
    if new_status is not None and new_status not in BENEFICIARY_STATUSES:
        raise ValidationError(f"Unknown beneficiary status: {new_status}")
    if fields.get("risk_level") is not None and fields["risk_level"] not in RISK_LEVELS:
        raise ValidationError(f"Unknown risk level: {fields['risk_level']}")

    for name in PROFILE_FIELDS:
        if name in fields:
            setattr(beneficiary, name, fields[name])

    previous_status = beneficiary.status
    if new_status is not None:
        beneficiary.status = new_status
    beneficiary = repository.update(beneficiary)

    if new_status is not None and new_status != previous_status:
        repository.append_activity(
            beneficiary.id,  # type: ignore[arg-type]
            action=new_status,
            details=details or f"Status changed from {previous_status} by {actor.email}",
        )
        _notify_status_change(beneficiary, previous_status, session_factory)
        logger.info(
            "Beneficiary status changed",
            extra={
                "beneficiary_code": beneficiary.beneficiary_code,
                "from": previous_status,
                "to": new_status,
            },
        )
        beneficiary = repository.get_by_id(beneficiary.id)  # type: ignore[arg-type,assignment]

    return beneficiary


def set_beneficiary_status(
    identifier: str,
    status: str,
    *,
    actor: Principal,
    session_factory: SessionFactory,
    details: Optional[str] = None,
) -> Beneficiary:
    return update_beneficiary(
        identifier,
        {"status": status},
        actor=actor,
        session_factory=session_factory,
        details=details,
    )


def _notify_status_change(
    beneficiary: Beneficiary, previous_status: str, session_factory: SessionFactory
) -> None:
    """Prepare account-side effects of a status change; delivery happens elsewhere."""

    if beneficiary.user_id is None:
        return
    if beneficiary.status == "Suspended":
        logger.info("Suspension notice due", extra={"user_id": beneficiary.user_id})
    elif beneficiary.status == "Approved":
        token = issue_verification_token(beneficiary.user_id, session_factory)
        if token:
            logger.info("Activation token issued", extra={"user_id": beneficiary.user_id})
        elif previous_status == "Suspended":
            logger.info("Access restored notice due", extra={"user_id": beneficiary.user_id})


def serialize_beneficiary(beneficiary: Beneficiary, *, include_activity: bool = False) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": beneficiary.id,
        "beneficiaryId": beneficiary.beneficiary_code,
        "campaignId": beneficiary.campaign_id,
        "fullName": beneficiary.full_name,
        "gender": beneficiary.gender,
        "age": beneficiary.age,
        "district": beneficiary.district,
        "locality": beneficiary.locality,
        "phone": beneficiary.phone,
        "email": beneficiary.email,
        "idType": beneficiary.id_type,
        "idNumber": beneficiary.id_number,
        "status": beneficiary.status,
        "riskLevel": beneficiary.risk_level,
        "internalNotes": beneficiary.internal_notes,
        "createdAt": beneficiary.created_at.isoformat() if beneficiary.created_at else None,
    }
    if include_activity:
        payload["activityLog"] = [
            {
                "action": entry.action,
                "details": entry.details,
                "timestamp": entry.timestamp.isoformat(),
            }
            for entry in beneficiary.activity
        ]
    return payload
