"""Sample pension-backed loan customers."""

from __future__ import annotations

import random
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterator

from coop_lending.config import FeePolicy
from coop_lending.editor import LoanApplicationDraft, make_document
from coop_lending.generators.base import BaseGenerator
from coop_lending.lifecycle import apply_transition
from coop_lending.models.lending import (
    Customer,
    CustomerStatus,
    DocumentCategory,
    Gender,
    InterestType,
    MaritalStatus,
    PensionType,
)


class CustomerGenerator(BaseGenerator):
    """Generate synthetic loan customers with consistent derived terms."""

    PAYING_OFFICES = [
        "PT Pos Indonesia",
        "Bank BTPN",
        "Bank SMBC Indonesia",
        "Bank BRI",
        "Bank Mantap",
        "DP Taspen",
        "Bank BNI",
        "Bank Mandiri",
    ]
    OFFICE_WEIGHTS = [0.25, 0.10, 0.08, 0.20, 0.15, 0.07, 0.08, 0.07]

    MARITAL_STATUS = list(MaritalStatus)
    MARITAL_WEIGHTS = [0.55, 0.05, 0.10, 0.20, 0.10]

    STATUS = list(CustomerStatus)
    STATUS_WEIGHTS = [0.75, 0.05, 0.08, 0.06, 0.03, 0.03]

    TENURES = [12, 24, 36, 48, 60, 72, 84, 96, 120]

    def __init__(
        self,
        seed: int | None = None,
        today: date | None = None,
        marketing_names: list[str] | None = None,
        fee_policy: FeePolicy | None = None,
    ) -> None:
        super().__init__(seed)
        self.today = today or date.today()
        self.fee_policy = fee_policy or FeePolicy()
        self.marketing_names = marketing_names or [self.fake.first_name() for _ in range(4)]

    def generate(self) -> Customer:
        """Generate a single customer.

        Returns
        -------
        Customer
            Generated customer.
        """
        return self._generate_one()

    def generate_batch(self, count: int) -> Iterator[Customer]:
        """Generate multiple customers.

        Parameters
        ----------
        count : int
            Number of customers to generate.

        Yields
        ------
        Customer
            Generated customers.
        """
        for _ in range(count):
            yield self._generate_one()

    def _generate_one(self) -> Customer:
        draft = LoanApplicationDraft(record_id=self.fake.uuid4(), fee_policy=self.fee_policy)
        gender = random.choice(list(Gender))
        draft.update_personal(
            full_name=self.fake.name_male() if gender == Gender.MALE else self.fake.name_female(),
            nik=self.fake.numerify("################"),
            birth_date=self.today - timedelta(days=random.randint(56 * 365, 80 * 365)),
            gender=gender,
            marital_status=random.choices(self.MARITAL_STATUS, weights=self.MARITAL_WEIGHTS, k=1)[0],
            address=self.fake.address().replace("\n", ", "),
            phone_number=self.fake.numerify("08##########"),
        )

        pension_type = random.choices([PensionType.TASPEN, PensionType.ASABRI], weights=[0.8, 0.2], k=1)[0]
        # Log-normal pension salary, ~3.3M median
        salary = min(15_000_000, max(1_500_000, random.lognormvariate(mu=15.0, sigma=0.35)))
        sk_issued = self.today - timedelta(days=random.randint(365, 20 * 365))
        draft.update_pension(
            pension_number=self.fake.numerify("#############"),
            former_institution=random.choices(self.PAYING_OFFICES, weights=self.OFFICE_WEIGHTS, k=1)[0],
            pension_type=pension_type,
            sk_number=self.fake.bothify("SK-####/??/####").upper(),
            sk_issuance_date=sk_issued,
            sk_received_date=self.today - timedelta(days=random.randint(0, 3 * 365)),
            salary_amount=Decimal(round(salary, -3)),
        )

        disbursed = self.today - timedelta(days=random.randint(0, 3 * 365))
        interest_type = random.choices([InterestType.ANNUITY, InterestType.FLAT], weights=[0.7, 0.3], k=1)[0]
        rate = Decimal(random.choice(["24", "28", "30", "35"])) if interest_type == InterestType.ANNUITY else Decimal(
            random.choice(["1.5", "1.8", "2", "2.2"])
        )
        draft.update_nominative(
            loan_date=disbursed,
            disbursement_date=disbursed,
            spk_code=self.fake.bothify("SPK/####/##"),
            loan_amount=Decimal(random.randint(10, 300) * 1_000_000),
            interest_type=interest_type,
            interest_rate=rate,
            tenure_months=random.choice(self.TENURES),
            blocked_installment_count=random.choice([0, 0, 1, 2]),
        )
        draft.marketing_name = random.choice(self.marketing_names)
        draft.add_documents(
            DocumentCategory.SK,
            [make_document("sk.pdf", "application/pdf", f"files/{self.fake.uuid4()}.pdf")],
        )

        created_at = datetime.combine(disbursed, datetime.min.time())
        customer = draft.to_customer(now=created_at)

        status = random.choices(self.STATUS, weights=self.STATUS_WEIGHTS, k=1)[0]
        if status != CustomerStatus.ACTIVE:
            resolved_on = disbursed + timedelta(days=random.randint(0, max(0, (self.today - disbursed).days)))
            notes = f"Ahli waris: {self.fake.name()}" if status == CustomerStatus.DECEASED else ""
            customer = apply_transition(customer, status, resolved_on, notes=notes)
        return customer
