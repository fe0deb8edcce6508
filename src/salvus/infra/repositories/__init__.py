"""Concrete repository implementations using SQLModel."""

from .beneficiary import SQLModelBeneficiaryRepository
from .campaign import SQLModelCampaignRepository
from .organisation import SQLModelOrganisationRepository
from .transaction import SQLModelTransactionRepository
from .vendor import SQLModelVendorRepository

__all__ = [
    "SQLModelBeneficiaryRepository",
    "SQLModelCampaignRepository",
    "SQLModelOrganisationRepository",
    "SQLModelTransactionRepository",
    "SQLModelVendorRepository",
]
