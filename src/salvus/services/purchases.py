"""Vendor-confirmed purchases with nominal spending-limit enforcement."""

from __future__ import annotations

from typing import Any

from ..domain.repositories import VendorRepository
from ..errors import ForbiddenError, NotFoundError, ValidationError
from ..infra.repositories import (
    SQLModelBeneficiaryRepository,
    SQLModelCampaignRepository,
    SQLModelTransactionRepository,
    SQLModelVendorRepository,
)
from ..logging_config import get_logger
from ..models.transaction import Transaction
from ..models.vendor import Vendor
from .campaigns import load_campaign_limits, normalize_category_label
from .context import RequestContext
from .spending import aggregate_spend, coerce_amount, remaining_balance

logger = get_logger(__name__)


def record_purchase(
    ctx: RequestContext, *, beneficiary_code: str, category: str, amount: Any
) -> Transaction:
    """Charge a beneficiary's allowance on behalf of the calling vendor.

    Checks run against the beneficiary's full history at the time of the
    call; a concurrent purchase may slip through the same window.
    """

    factory = ctx.session_factory
    vendors = SQLModelVendorRepository(factory)
    vendor = vendors.get_for_user(ctx.principal.user_id)
    if vendor is None:
        raise NotFoundError("Vendor profile not found")
    if vendor.status != "Approved":
        raise ForbiddenError("Vendor is not approved to accept payments")

    value = coerce_amount(amount)
    if value <= 0:
        raise ValidationError("Amount must be a number greater than 0")
    label = normalize_category_label(category or "")
    if not label:
        raise ValidationError("Category is required")
    if vendor.authorized_categories and label not in vendor.authorized_categories:
        raise ForbiddenError(f'Store is not authorized for category "{label}"')

    beneficiary = SQLModelBeneficiaryRepository(factory).get_by_code((beneficiary_code or "").strip())
    if beneficiary is None:
        raise NotFoundError("Beneficiary not found")
    if beneficiary.campaign_id != vendor.campaign_id:
        raise ForbiddenError("Beneficiary belongs to a different campaign")
    if beneficiary.status != "Approved":
        raise ForbiddenError("Beneficiary is not approved to spend")

    limits = load_campaign_limits(vendor.campaign_id, repository=SQLModelCampaignRepository(factory))
    if limits.campaign is None or limits.campaign.status != "Active":
        raise ForbiddenError("Campaign is not accepting purchases")
    if label not in limits.limits:
        raise ValidationError(f'Category "{label}" has no spending limit in this campaign')

    transactions = SQLModelTransactionRepository(factory)
    spend = aggregate_spend(transactions.list_for_beneficiary(beneficiary.id))  # type: ignore[arg-type]
    remaining = remaining_balance(limits.limits[label], spend.spent_on(label))
    if value > remaining:
        raise ValidationError(
            f'Amount exceeds remaining "{label}" balance of {remaining:.2f}'
        )
    if spend.total + value > limits.beneficiary_cap:
        raise ValidationError(
            f"Amount exceeds overall allowance; {max(0.0, limits.beneficiary_cap - spend.total):.2f} left"
        )

    created = transactions.create(
        Transaction(
            campaign_id=vendor.campaign_id,
            beneficiary_id=beneficiary.id,  # type: ignore[arg-type]
            vendor_id=vendor.id,  # type: ignore[arg-type]
            amount=value,
            category=label,
            status="Completed",
        )
    )
    _credit_vendor(vendors, vendor, value)
    logger.info(
        "Purchase recorded",
        extra={
            "transaction_id": created.id,
            "beneficiary_code": beneficiary.beneficiary_code,
            "store_code": vendor.store_code,
            "category": label,
            "amount": value,
        },
    )
    return created


def _credit_vendor(vendors: VendorRepository, vendor: Vendor, amount: float) -> None:
    vendor.total_paid = round(coerce_amount(vendor.total_paid) + amount, 2)
    vendors.update(vendor)


def serialize_transaction(transaction: Transaction) -> dict[str, Any]:
    return {
        "id": transaction.id,
        "campaignId": transaction.campaign_id,
        "beneficiaryId": transaction.beneficiary_id,
        "vendorId": transaction.vendor_id,
        "amount": transaction.amount,
        "category": transaction.category,
        "status": transaction.status,
        "timestamp": transaction.timestamp.isoformat() if transaction.timestamp else None,
    }
