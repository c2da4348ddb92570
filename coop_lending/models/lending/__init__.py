"""Lending domain models."""

from coop_lending.models.lending.customer import Customer, PensionData, PersonalInfo
from coop_lending.models.lending.document import CustomerDocument
from coop_lending.models.lending.enums import (
    CustomerStatus,
    DocumentCategory,
    DocumentType,
    Gender,
    InterestType,
    LoanType,
    MaritalStatus,
    PensionType,
    RepaymentType,
)
from coop_lending.models.lending.marketing import MarketingTarget
from coop_lending.models.lending.nominative import NominativeData

__all__ = [
    "Customer",
    "CustomerDocument",
    "CustomerStatus",
    "DocumentCategory",
    "DocumentType",
    "Gender",
    "InterestType",
    "LoanType",
    "MaritalStatus",
    "MarketingTarget",
    "NominativeData",
    "PensionData",
    "PensionType",
    "PersonalInfo",
    "RepaymentType",
]
