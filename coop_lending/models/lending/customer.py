"""Customer aggregate for lending domain."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from coop_lending.models.lending.document import CustomerDocument
from coop_lending.models.lending.enums import (
    CustomerStatus,
    Gender,
    MaritalStatus,
    PensionType,
)
from coop_lending.models.lending.nominative import NominativeData


@dataclass
class PersonalInfo:
    """Identity attributes of a pension-holder."""

    full_name: str = ""
    nik: str = ""  # national ID number
    birth_date: date | None = None
    gender: Gender = Gender.MALE
    marital_status: MaritalStatus = MaritalStatus.MARRIED
    address: str = ""
    phone_number: str = ""


@dataclass
class PensionData:
    """Pension source of the borrower."""

    pension_number: str = ""  # NOPEN
    former_institution: str = ""  # paying office
    mutation_office: str = ""  # paying office after mutation, if any
    pension_type: PensionType = PensionType.TASPEN
    sk_number: str = ""
    sk_issuance_date: date | None = None
    sk_received_date: date | None = None  # original SK taken into custody
    sk_description: str = ""
    salary_amount: Decimal = Decimal("0")


@dataclass
class Customer:
    """Loan customer, the aggregate root of the repository."""

    id: str
    personal: PersonalInfo
    pension: PensionData
    nominative: NominativeData
    created_at: datetime
    documents: list[CustomerDocument] = field(default_factory=list)
    marketing_name: str | None = None
    status: CustomerStatus = CustomerStatus.ACTIVE
    resolution_date: date | None = None
    resolution_notes: str | None = None
    resolution_amount: Decimal | None = None

    @property
    def is_active(self) -> bool:
        return self.status == CustomerStatus.ACTIVE
