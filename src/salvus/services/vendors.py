"""Vendor onboarding and status management."""

from __future__ import annotations

from typing import Any, Mapping

from sqlmodel import select

from ..domain.repositories import VendorRepository
from ..errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ..infra.database import SessionFactory
from ..infra.repositories import SQLModelCampaignRepository, SQLModelVendorRepository
from ..logging_config import get_logger
from ..models.user import User
from ..models.vendor import VENDOR_STATUSES, Vendor
from .auth import Principal, issue_verification_token
from .campaigns import normalize_categories
from .identifiers import generate_code

logger = get_logger(__name__)

PROFILE_FIELDS = ("name", "category", "district", "area", "phone", "contact_person")


def onboard_vendor(
    fields: Mapping[str, Any], *, actor: Principal, session_factory: SessionFactory
) -> Vendor:
    """Register a store for a campaign along with its passwordless login."""

    campaign = SQLModelCampaignRepository(session_factory).get_by_id(fields["campaign_id"])
    if campaign is None:
        raise NotFoundError("Campaign not found")
    if campaign.created_by != actor.user_id:
        raise ForbiddenError("Campaign belongs to another organisation")

    repository = SQLModelVendorRepository(session_factory)
    email = fields["email"].strip().lower()
    code = generate_store_code(repository)
    authorized = normalize_categories(fields.get("authorized_categories") or [], {})

    with session_factory() as session:
        if session.exec(select(User.id).where(User.email == email)).first() is not None:
            raise ConflictError("Email already registered in system")
        user = User(
            name=fields.get("contact_person") or fields["name"],
            email=email,
            role="Vendor",
            is_verified=False,
            requires_password_setup=True,
        )
        session.add(user)
        session.flush()
        vendor = Vendor(
            store_code=code,
            campaign_id=campaign.id,
            user_id=user.id,
            created_by=actor.user_id,
            email=email,
            authorized_categories=authorized,
            status="Pending",
            **{name: fields[name] for name in PROFILE_FIELDS if name in fields},
        )
        session.add(vendor)
        session.commit()
        vendor_id = vendor.id

    logger.info(
        "Vendor onboarded",
        extra={"store_code": code, "campaign_id": campaign.id, "created_by": actor.user_id},
    )
    return repository.get_by_id(vendor_id)  # type: ignore[arg-type,return-value]


def generate_store_code(repository: VendorRepository) -> str:
    return generate_code("STR", repository.code_exists)


def find_vendor(identifier: str, *, actor: Principal, session_factory: SessionFactory) -> Vendor:
    vendor = SQLModelVendorRepository(session_factory).find_for_admin(
        identifier, admin_id=actor.user_id
    )
    if vendor is None:
        raise NotFoundError()
    return vendor


def update_vendor(
    identifier: str,
    fields: Mapping[str, Any],
    *,
    actor: Principal,
    session_factory: SessionFactory,
) -> Vendor:
    """Apply profile edits, authorized categories and status changes."""

    repository = SQLModelVendorRepository(session_factory)
    vendor = find_vendor(identifier, actor=actor, session_factory=session_factory)

    new_status = fields.get("status")
    if new_status is not None and new_status not in VENDOR_STATUSES:
        raise ValidationError(f"Unknown vendor status: {new_status}")

    for name in PROFILE_FIELDS:
        if name in fields:
            setattr(vendor, name, fields[name])
    if fields.get("authorized_categories") is not None:
        vendor.authorized_categories = normalize_categories(fields["authorized_categories"], {})

    previous_status = vendor.status
    if new_status is not None:
        vendor.status = new_status
    vendor = repository.update(vendor)

    if new_status is not None and new_status != previous_status:
        if new_status == "Approved" and vendor.user_id is not None:
            if issue_verification_token(vendor.user_id, session_factory):
                logger.info("Activation token issued", extra={"user_id": vendor.user_id})
        logger.info(
            "Vendor status changed",
            extra={"store_code": vendor.store_code, "from": previous_status, "to": new_status},
        )
    return vendor


def set_vendor_status(
    identifier: str, status: str, *, actor: Principal, session_factory: SessionFactory
) -> Vendor:
    return update_vendor(
        identifier, {"status": status}, actor=actor, session_factory=session_factory
    )


def approved_store_names(campaign_id: int, *, session_factory: SessionFactory) -> list[str]:
    return SQLModelVendorRepository(session_factory).approved_names(campaign_id)


def serialize_vendor(vendor: Vendor) -> dict[str, Any]:
    return {
        "id": vendor.id,
        "storeId": vendor.store_code,
        "campaignId": vendor.campaign_id,
        "name": vendor.name,
        "category": vendor.category,
        "district": vendor.district,
        "area": vendor.area,
        "phone": vendor.phone,
        "email": vendor.email,
        "contactPerson": vendor.contact_person,
        "authorizedCategories": list(vendor.authorized_categories or []),
        "totalPaid": vendor.total_paid,
        "status": vendor.status,
        "createdAt": vendor.created_at.isoformat() if vendor.created_at else None,
    }
