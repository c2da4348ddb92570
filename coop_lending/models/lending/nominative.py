"""Loan terms (nominative) model for lending domain."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from coop_lending.models.lending.enums import InterestType, LoanType, RepaymentType


@dataclass
class NominativeData:
    """Loan terms of a customer's active or most recent loan.

    ``monthly_installment`` and ``maturity_date`` are derived fields; they
    are recomputed by ``coop_lending.engine.derive_terms`` whenever an input
    changes and are never authored directly.
    """

    loan_type: LoanType = LoanType.NEW
    loan_date: date | None = None
    spk_code: str = ""
    loan_amount: Decimal = Decimal("0")  # plafon
    interest_type: InterestType = InterestType.ANNUITY
    interest_rate: Decimal = Decimal("0")  # annual % for ANNUITY, monthly % for FLAT
    tenure_months: int = 0
    monthly_installment: Decimal = Decimal("0")
    disbursement_date: date | None = None
    maturity_date: date | None = None
    repayment_notes: str = ""

    # Fees
    admin_fee: Decimal = Decimal("0")
    provision_fee: Decimal = Decimal("0")
    marketing_fee: Decimal = Decimal("0")
    risk_reserve: Decimal = Decimal("0")
    flagging_fee: Decimal = Decimal("0")

    # Savings
    principal_savings: Decimal = Decimal("0")
    mandatory_savings: Decimal = Decimal("0")  # paid monthly with the installment

    # Payoff of a prior loan (top-up / take-over)
    repayment_type: RepaymentType = RepaymentType.TOPUP
    repayment_amount: Decimal = Decimal("0")

    # Blocking
    blocked_amount_sk: Decimal = Decimal("0")
    blocked_installment_count: int = 0


DERIVED_FIELDS = ("monthly_installment", "maturity_date")

DERIVATION_INPUTS = (
    "loan_amount",
    "interest_rate",
    "interest_type",
    "tenure_months",
    "disbursement_date",
)
