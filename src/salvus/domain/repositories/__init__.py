"""Repository protocol definitions for domain layer."""

from .beneficiary import BeneficiaryRepository
from .campaign import CampaignRepository
from .organisation import OrganisationRepository
from .transaction import TransactionRepository
from .vendor import VendorRepository

__all__ = [
    "BeneficiaryRepository",
    "CampaignRepository",
    "OrganisationRepository",
    "TransactionRepository",
    "VendorRepository",
]
