"""Spend aggregation and per-category balance computation.

Campaign categories are an open, admin-configured key set, so limits and
spend are plain ``label -> amount`` mappings throughout. Every lookup of a
label that is missing on one side defaults to zero.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from ..models.transaction import Transaction

CategoryAmounts = Mapping[str, float]


def coerce_amount(value: Any) -> float:
    """Return ``value`` as a finite float; missing or unusable values become 0."""

    if value is None or isinstance(value, bool):
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(amount):
        return 0.0
    return amount


@dataclass(slots=True)
class SpendTotals:
    """Spend summed per category and overall from one pass over transactions."""

    by_category: dict[str, float] = field(default_factory=dict)
    total: float = 0.0

    def spent_on(self, category: str) -> float:
        return self.by_category.get(category, 0.0)


def aggregate_spend(transactions: Iterable[Transaction]) -> SpendTotals:
    """Sum transaction amounts per category and in total.

    Categories that no transaction touches are absent from ``by_category``
    rather than present with a zero value.
    """

    by_category: dict[str, float] = {}
    total = 0.0
    for txn in transactions:
        amount = coerce_amount(txn.amount)
        by_category[txn.category] = by_category.get(txn.category, 0.0) + amount
        total += amount

    return SpendTotals(
        by_category={label: round(value, 2) for label, value in by_category.items()},
        total=round(total, 2),
    )


@dataclass(slots=True, frozen=True)
class Balance:
    """Remaining spend capacity for one category."""

    label: str
    limit: float
    spent: float
    remaining: float
    active: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "remaining": self.remaining,
            "limit": self.limit,
            "spent": self.spent,
            "active": self.active,
        }


def remaining_balance(limit: float, spent: float) -> float:
    """Limit minus spend, never below zero."""

    return max(0.0, round(limit - spent, 2))


def compute_balances(
    categories: Sequence[str],
    limits: CategoryAmounts,
    spent_by_category: CategoryAmounts,
) -> list[Balance]:
    """Build one balance per category that has a configured limit.

    Iteration follows ``limits``, not ``categories``: a limit configured for a
    label missing from the campaign's category list still gets a balance,
    flagged ``active=False``.
    """

    active_labels = set(categories)
    balances: list[Balance] = []
    for label in limits:
        limit = round(coerce_amount(limits.get(label)), 2)
        spent = round(coerce_amount(spent_by_category.get(label)), 2)
        balances.append(
            Balance(
                label=label,
                limit=limit,
                spent=spent,
                remaining=remaining_balance(limit, spent),
                active=label in active_labels,
            )
        )
    return balances


def unallocated_spend(limits: CategoryAmounts, spent_by_category: CategoryAmounts) -> float:
    """Spend recorded under labels that have no configured limit.

    That spend counts toward the overall total but shows up in no
    per-category balance.
    """

    return round(
        sum(
            coerce_amount(amount)
            for label, amount in spent_by_category.items()
            if label not in limits
        ),
        2,
    )
