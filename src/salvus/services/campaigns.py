"""Campaign records: category-limit access and admin management."""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Optional

from ..domain.repositories import CampaignRepository
from ..errors import ForbiddenError, NotFoundError, ValidationError
from ..infra.database import SessionFactory
from ..infra.repositories import (
    SQLModelBeneficiaryRepository,
    SQLModelCampaignRepository,
    SQLModelTransactionRepository,
    SQLModelVendorRepository,
)
from ..logging_config import get_logger
from ..models.campaign import CAMPAIGN_STATUSES, Campaign
from .auth import Principal
from .spending import coerce_amount

logger = get_logger(__name__)

# Allowed status moves; Closed is terminal.
_STATUS_TRANSITIONS: dict[str, frozenset[str]] = {
    "Active": frozenset({"Paused", "Closed"}),
    "Paused": frozenset({"Active", "Closed"}),
    "Closed": frozenset(),
}

_UPDATABLE_FIELDS = (
    "name",
    "location",
    "state_region",
    "district",
    "disaster_type",
    "description",
    "urgency",
    "total_funds_allocated",
    "beneficiary_cap",
    "start_date",
    "end_date",
)


# ---------------------------------------------------------------------------
# Category limit access
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class CampaignLimits:
    """Spending configuration read off a campaign record."""

    campaign: Optional[Campaign] = None
    categories: list[str] = field(default_factory=list)
    limits: dict[str, float] = field(default_factory=dict)
    beneficiary_cap: float = 0.0


def campaign_categories(campaign: Optional[Campaign]) -> list[str]:
    """Return the campaign's category labels, or ``[]`` when unusable."""

    raw = getattr(campaign, "categories", None)
    if not isinstance(raw, (list, tuple)):
        return []
    return [str(label) for label in raw]


def category_limits(campaign: Optional[Campaign]) -> dict[str, float]:
    """Return ``label -> ceiling`` for a campaign, never raising.

    Absent or non-mapping limit data yields an empty mapping; values that do
    not parse as numbers count as a zero ceiling.
    """

    raw = getattr(campaign, "category_max_limits", None)
    if not isinstance(raw, Mapping):
        return {}
    return {str(label): coerce_amount(value) for label, value in raw.items()}


def read_campaign_limits(campaign: Optional[Campaign]) -> CampaignLimits:
    if campaign is None:
        return CampaignLimits()
    return CampaignLimits(
        campaign=campaign,
        categories=campaign_categories(campaign),
        limits=category_limits(campaign),
        beneficiary_cap=coerce_amount(campaign.beneficiary_cap),
    )


def load_campaign_limits(
    campaign_id: Optional[int], *, repository: CampaignRepository
) -> CampaignLimits:
    """Fetch a campaign and read its limits; a missing campaign gives empty limits."""

    campaign = repository.get_by_id(campaign_id) if campaign_id is not None else None
    if campaign is None:
        logger.warning("Campaign %s not found while reading limits", campaign_id)
    return read_campaign_limits(campaign)


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def normalize_category_label(raw: Any) -> str:
    return str(raw).strip().lower()


def normalize_category_limits(
    raw: Any, *, beneficiary_cap: Optional[float]
) -> dict[str, float]:
    """Normalize admin-submitted limits, rejecting unusable entries.

    Keys are trimmed and lower-cased; values must be finite, non-negative and
    no larger than the per-beneficiary cap when one is known.
    """

    if not isinstance(raw, Mapping):
        raise ValidationError("Category limits must be an object of category -> maximum")

    normalized: dict[str, float] = {}
    for raw_key, raw_value in raw.items():
        key = normalize_category_label(raw_key)
        if not key:
            raise ValidationError("Category names must be non-empty after trimming")
        try:
            value = float(raw_value)
        except (TypeError, ValueError):
            value = math.nan
        if isinstance(raw_value, bool) or not math.isfinite(value) or value < 0:
            raise ValidationError(f'Category "{raw_key}" MAX must be a number >= 0')
        if beneficiary_cap is not None and value > beneficiary_cap:
            raise ValidationError(f'Category "{raw_key}" MAX cannot exceed perBeneficiaryCap')
        normalized[key] = value
    return normalized


def normalize_categories(raw: Optional[Iterable[Any]], limits: Mapping[str, float]) -> list[str]:
    """Normalize the category list, defaulting to the limit keys."""

    if raw is None or isinstance(raw, (str, bytes)):
        return list(limits)
    labels: list[str] = []
    for item in raw:
        label = normalize_category_label(item)
        if label and label not in labels:
            labels.append(label)
    return labels


def slugify(name: str) -> str:
    return re.sub(r"(^-|-$)+", "", re.sub(r"[^a-z0-9]+", "-", name.lower()))


def _unique_slug(name: str, repository: CampaignRepository) -> str:
    base = slugify(name) or "campaign"
    slug = base
    suffix = 2
    while repository.slug_exists(slug):
        slug = f"{base}-{suffix}"
        suffix += 1
    return slug


def _check_cap(beneficiary_cap: float, total_funds_allocated: float) -> None:
    if beneficiary_cap <= 0:
        raise ValidationError("perBeneficiaryCap must be a number greater than 0")
    if beneficiary_cap >= total_funds_allocated:
        raise ValidationError("Per-beneficiary cap must be less than total campaign budget")


def _check_dates(start: Optional[date], end: Optional[date]) -> None:
    if start and end and end < start:
        raise ValidationError("Campaign end date must not precede the start date")


# ---------------------------------------------------------------------------
# Admin operations
# ---------------------------------------------------------------------------


def create_campaign(
    fields: Mapping[str, Any], *, actor: Principal, session_factory: SessionFactory
) -> Campaign:
    """Validate business rules on form output and persist a new campaign."""

    repository = SQLModelCampaignRepository(session_factory)
    cap = float(fields["beneficiary_cap"])
    total = float(fields.get("total_funds_allocated") or 0.0)
    _check_cap(cap, total)
    _check_dates(fields.get("start_date"), fields.get("end_date"))

    limits: dict[str, float] = {}
    if fields.get("category_max_limits") is not None:
        limits = normalize_category_limits(fields["category_max_limits"], beneficiary_cap=cap)
    categories = normalize_categories(fields.get("categories"), limits)
    if not categories:
        raise ValidationError("Allowed categories are required")

    campaign = Campaign(
        created_by=actor.user_id,
        slug=_unique_slug(fields["name"], repository),
        categories=categories,
        category_max_limits=limits or None,
        **{name: fields[name] for name in _UPDATABLE_FIELDS if name in fields},
    )
    created = repository.create(campaign)
    logger.info(
        "Campaign created",
        extra={"campaign_id": created.id, "created_by": actor.user_id, "categories": categories},
    )
    return created


def _owned_campaign(
    campaign_id: int, actor: Principal, repository: CampaignRepository
) -> Campaign:
    campaign = repository.get_by_id(campaign_id)
    if campaign is None:
        raise NotFoundError("Campaign not found")
    if campaign.created_by != actor.user_id:
        raise ForbiddenError("Campaign belongs to another organisation")
    return campaign


def update_campaign(
    campaign_id: int,
    fields: Mapping[str, Any],
    *,
    actor: Principal,
    session_factory: SessionFactory,
) -> Campaign:
    """Apply a partial update; limits are re-validated against the resulting cap."""

    repository = SQLModelCampaignRepository(session_factory)
    campaign = _owned_campaign(campaign_id, actor, repository)

    for name in _UPDATABLE_FIELDS:
        if name in fields:
            setattr(campaign, name, fields[name])
    if "beneficiary_cap" in fields or "total_funds_allocated" in fields:
        _check_cap(float(campaign.beneficiary_cap), float(campaign.total_funds_allocated))
    _check_dates(campaign.start_date, campaign.end_date)

    if fields.get("category_max_limits") is not None:
        limits = normalize_category_limits(
            fields["category_max_limits"], beneficiary_cap=float(campaign.beneficiary_cap)
        )
        campaign.category_max_limits = limits or None
        campaign.categories = normalize_categories(fields.get("categories"), limits)
    else:
        if "beneficiary_cap" in fields:
            normalize_category_limits(
                category_limits(campaign), beneficiary_cap=float(campaign.beneficiary_cap)
            )
        if fields.get("categories") is not None:
            campaign.categories = normalize_categories(
                fields["categories"], category_limits(campaign)
            )
    if not campaign_categories(campaign):
        raise ValidationError("Allowed categories are required")

    updated = repository.update(campaign)
    logger.info("Campaign updated", extra={"campaign_id": campaign_id, "fields": sorted(fields)})
    return updated


def change_campaign_status(
    campaign_id: int, status: str, *, actor: Principal, session_factory: SessionFactory
) -> Campaign:
    """Pause, resume or close a campaign."""

    if status not in CAMPAIGN_STATUSES:
        raise ValidationError(f"Unknown campaign status: {status}")
    repository = SQLModelCampaignRepository(session_factory)
    campaign = _owned_campaign(campaign_id, actor, repository)
    if status == campaign.status:
        return campaign
    if status not in _STATUS_TRANSITIONS.get(campaign.status, frozenset()):
        raise ValidationError(f"Cannot move campaign from {campaign.status} to {status}")

    previous = campaign.status
    campaign.status = status
    updated = repository.update(campaign)
    logger.info(
        "Campaign status changed",
        extra={"campaign_id": campaign_id, "from": previous, "to": status},
    )
    return updated


def list_campaigns(principal: Principal, *, session_factory: SessionFactory) -> list[Campaign]:
    """Admins see the campaigns they run; everyone else sees active ones."""

    repository = SQLModelCampaignRepository(session_factory)
    if principal.role == "Admin":
        return repository.list_for_admin(principal.user_id)
    return repository.list_by_status("Active")


def campaign_detail(campaign_id: int, *, session_factory: SessionFactory) -> dict[str, Any]:
    """Campaign payload with headline stats and the newest participants."""

    campaign = SQLModelCampaignRepository(session_factory).get_by_id(campaign_id)
    if campaign is None:
        raise NotFoundError("Campaign not found")

    beneficiaries = SQLModelBeneficiaryRepository(session_factory)
    vendors = SQLModelVendorRepository(session_factory)
    transactions = SQLModelTransactionRepository(session_factory)

    # Imported here: beneficiary/vendor services import this module.
    from .beneficiaries import serialize_beneficiary
    from .vendors import serialize_vendor

    payload = serialize_campaign(campaign)
    payload["stats"] = {
        "beneficiaries": beneficiaries.count_for_campaign(campaign_id),
        "vendors": vendors.count_for_campaign(campaign_id),
        "fundsSpent": transactions.settled_total_for_campaign(campaign_id),
    }
    payload["beneficiaries"] = [
        serialize_beneficiary(item) for item in beneficiaries.list_for_campaign(campaign_id)
    ]
    payload["vendors"] = [serialize_vendor(item) for item in vendors.list_for_campaign(campaign_id)]
    return payload


def serialize_campaign(campaign: Campaign) -> dict[str, Any]:
    return {
        "id": campaign.id,
        "name": campaign.name,
        "slug": campaign.slug,
        "location": campaign.location,
        "stateRegion": campaign.state_region,
        "district": campaign.district,
        "disasterType": campaign.disaster_type,
        "status": campaign.status,
        "totalFundsAllocated": campaign.total_funds_allocated,
        "beneficiaryCap": campaign.beneficiary_cap,
        "fundsRaised": campaign.funds_raised,
        "startDate": campaign.start_date.isoformat() if campaign.start_date else None,
        "endDate": campaign.end_date.isoformat() if campaign.end_date else None,
        "categories": campaign_categories(campaign),
        "categoryMaxLimits": category_limits(campaign),
        "description": campaign.description,
        "urgency": campaign.urgency,
        "createdAt": campaign.created_at.isoformat() if campaign.created_at else None,
    }
