"""Beneficiary dashboard composition.

Pulls the beneficiary, their campaign's limits, approved stores and
transaction history, then shapes the payload the dashboard renders. Nothing
here writes to the database.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Optional

from ..domain.repositories import (
    BeneficiaryRepository,
    CampaignRepository,
    OrganisationRepository,
    TransactionRepository,
    VendorRepository,
)
from ..errors import NotFoundError
from ..infra.repositories import (
    SQLModelBeneficiaryRepository,
    SQLModelCampaignRepository,
    SQLModelOrganisationRepository,
    SQLModelTransactionRepository,
    SQLModelVendorRepository,
)
from ..logging_config import get_logger
from ..models.base import as_utc
from ..models.beneficiary import Beneficiary
from ..models.transaction import Transaction
from .campaigns import CampaignLimits, load_campaign_limits
from .context import RequestContext
from .spending import (
    Balance,
    aggregate_spend,
    coerce_amount,
    compute_balances,
    unallocated_spend,
)

logger = get_logger(__name__)

DEFAULT_STORE_NAME = "Store"
DEFAULT_TRANSACTION_STATUS = "Paid"

# Fixed English abbreviations; strftime's %b follows the process locale.
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def format_history_date(value: datetime) -> str:
    """Render ``value`` as ``DD Mon YYYY``."""

    return f"{value.day:02d} {MONTH_ABBREVIATIONS[value.month - 1]} {value.year}"


@dataclass(slots=True, frozen=True)
class HistoryEntry:
    store: str
    category: str
    amount: float
    date: str
    status: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "store": self.store,
            "category": self.category,
            "amount": self.amount,
            "date": self.date,
            "status": self.status,
        }


@dataclass(slots=True)
class BeneficiaryDashboard:
    beneficiary: dict[str, Any]
    campaign: dict[str, Any]
    approver: str = ""
    approval_date: Optional[datetime] = None
    categories: list[str] = field(default_factory=list)
    stores: list[str] = field(default_factory=list)
    total_limit: float = 0.0
    total_spent: float = 0.0
    unallocated_spent: float = 0.0
    balances: list[Balance] = field(default_factory=list)
    history: list[HistoryEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "beneficiary": self.beneficiary,
            "campaign": self.campaign,
            "approver": self.approver,
            "approvalDate": self.approval_date.isoformat() if self.approval_date else None,
            "categories": self.categories,
            "stores": self.stores,
            "totalLimit": self.total_limit,
            "totalSpent": self.total_spent,
            "unallocatedSpent": self.unallocated_spent,
            "balances": [balance.to_dict() for balance in self.balances],
            "history": [entry.to_dict() for entry in self.history],
        }


def approval_date(beneficiary: Beneficiary) -> Optional[datetime]:
    """When the beneficiary was approved, or ``None`` unless currently approved.

    Uses the newest ``Approved`` activity entry and falls back to the record's
    creation time when the log has none.
    """

    if beneficiary.status != "Approved":
        return None
    approvals = [
        as_utc(entry.timestamp)
        for entry in (beneficiary.activity or [])
        if entry.action == "Approved" and entry.timestamp is not None
    ]
    if approvals:
        return max(approvals)  # type: ignore[type-var]
    return as_utc(beneficiary.created_at)


def format_history(transactions: Iterable[Transaction], *, limit: int) -> list[HistoryEntry]:
    """Newest ``limit`` transactions reshaped for display."""

    newest_first = sorted(transactions, key=lambda txn: as_utc(txn.timestamp), reverse=True)
    entries: list[HistoryEntry] = []
    for txn in newest_first[: max(0, limit)]:
        vendor = txn.vendor
        entries.append(
            HistoryEntry(
                store=(vendor.name if vendor is not None and vendor.name else DEFAULT_STORE_NAME),
                category=txn.category,
                amount=coerce_amount(txn.amount),
                date=format_history_date(as_utc(txn.timestamp)),  # type: ignore[arg-type]
                status=txn.status or DEFAULT_TRANSACTION_STATUS,
            )
        )
    return entries


def compose_dashboard(
    beneficiary: Beneficiary,
    limits: CampaignLimits,
    *,
    transactions: list[Transaction],
    organisation_name: str = "",
    stores: Iterable[str] = (),
    history_limit: int = 10,
) -> BeneficiaryDashboard:
    """Assemble the dashboard from already-fetched records."""

    spend = aggregate_spend(transactions)
    balances = compute_balances(limits.categories, limits.limits, spend.by_category)
    unallocated = unallocated_spend(limits.limits, spend.by_category)
    if unallocated:
        logger.warning(
            "Spend recorded outside configured category limits",
            extra={
                "beneficiary_code": beneficiary.beneficiary_code,
                "unallocated": unallocated,
                "categories": sorted(set(spend.by_category) - set(limits.limits)),
            },
        )

    campaign = limits.campaign
    return BeneficiaryDashboard(
        beneficiary={
            "id": beneficiary.id,
            "beneficiaryId": beneficiary.beneficiary_code,
            "status": beneficiary.status,
            "fullName": beneficiary.full_name,
        },
        campaign={
            "id": campaign.id if campaign else None,
            "name": campaign.name if campaign else None,
            "location": (campaign.state_region or campaign.location or "") if campaign else "",
            "status": (campaign.status if campaign else None) or "Active",
        },
        approver=organisation_name,
        approval_date=approval_date(beneficiary),
        categories=limits.categories,
        stores=list(stores),
        total_limit=limits.beneficiary_cap,
        total_spent=spend.total,
        unallocated_spent=unallocated,
        balances=balances,
        history=format_history(transactions, limit=history_limit),
    )


def load_beneficiary_dashboard(ctx: RequestContext) -> BeneficiaryDashboard:
    """Build the dashboard for the beneficiary linked to the calling user."""

    factory = ctx.session_factory
    return dashboard_for_user(
        ctx.principal.user_id,
        beneficiaries=SQLModelBeneficiaryRepository(factory),
        campaigns=SQLModelCampaignRepository(factory),
        organisations=SQLModelOrganisationRepository(factory),
        vendors=SQLModelVendorRepository(factory),
        transactions=SQLModelTransactionRepository(factory),
        history_limit=ctx.history_limit,
    )


def dashboard_for_user(
    user_id: int,
    *,
    beneficiaries: BeneficiaryRepository,
    campaigns: CampaignRepository,
    organisations: OrganisationRepository,
    vendors: VendorRepository,
    transactions: TransactionRepository,
    history_limit: int = 10,
) -> BeneficiaryDashboard:
    beneficiary = beneficiaries.get_for_user(user_id)
    if beneficiary is None:
        raise NotFoundError("Not found")

    limits = load_campaign_limits(beneficiary.campaign_id, repository=campaigns)

    organisation_name = ""
    if limits.campaign is not None:
        organisation = organisations.get_by_owner(limits.campaign.created_by)
        organisation_name = organisation.name if organisation else ""

    return compose_dashboard(
        beneficiary,
        limits,
        transactions=transactions.list_for_beneficiary(beneficiary.id),  # type: ignore[arg-type]
        organisation_name=organisation_name,
        stores=vendors.approved_names(beneficiary.campaign_id),
        history_limit=history_limit,
    )
