"""SQLModel table exports."""

from .beneficiary import Beneficiary, BeneficiaryActivity
from .campaign import Campaign
from .organisation import Organisation
from .transaction import Transaction
from .user import User
from .vendor import Vendor

__all__ = [
    "Beneficiary",
    "BeneficiaryActivity",
    "Campaign",
    "Organisation",
    "Transaction",
    "User",
    "Vendor",
]
