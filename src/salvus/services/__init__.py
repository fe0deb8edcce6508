"""Service module exports."""

from . import (
    auth,
    beneficiaries,
    campaigns,
    context,
    dashboard,
    identifiers,
    purchases,
    spending,
    vendors,
)

__all__ = [
    "auth",
    "beneficiaries",
    "campaigns",
    "context",
    "dashboard",
    "identifiers",
    "purchases",
    "spending",
    "vendors",
]
