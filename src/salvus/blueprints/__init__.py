"""Blueprint exports."""

from . import auth, beneficiaries, campaigns, purchases, vendors

__all__ = [
    "auth",
    "beneficiaries",
    "campaigns",
    "purchases",
    "vendors",
]
