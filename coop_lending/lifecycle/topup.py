"""Top-up refinancing: payoff estimate and replacement loan draft."""

import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal

from coop_lending.engine.amounts import ZERO, to_amount, to_int
from coop_lending.engine.installment import months_between
from coop_lending.models.lending import Customer, CustomerStatus, LoanType, NominativeData, RepaymentType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PayoffEstimate:
    """Remaining-installments payoff of an existing loan.

    A plain sum of the installments still due, not a discounted
    present value.
    """

    months_elapsed: int
    months_remaining: int
    amount: Decimal


def estimate_payoff(nominative: NominativeData, today: date) -> PayoffEstimate:
    """Estimate what is still owed on a loan as of ``today``.

    Missing loan date, tenure or installment yield a zero payoff rather
    than an error; the user corrects it in the draft.
    """
    tenure = max(0, to_int(nominative.tenure_months))
    installment = to_amount(nominative.monthly_installment)

    elapsed = 0
    if nominative.loan_date is not None:
        elapsed = max(0, months_between(nominative.loan_date, today))
    remaining = max(0, tenure - elapsed)

    amount = remaining * installment if installment > 0 else ZERO
    return PayoffEstimate(months_elapsed=elapsed, months_remaining=remaining, amount=amount)


def build_topup_draft(customer: Customer, today: date) -> Customer:
    """Produce a provisional replacement loan seeded with the payoff.

    The draft keeps the customer's identity, pension data, documents and
    rate/tenure settings. The new principal, fees and maturity are left for
    the user to fill in; nothing is persisted here.
    """
    estimate = estimate_payoff(customer.nominative, today)
    logger.debug(
        "Top-up for %s: %d months elapsed, %d remaining, payoff %s",
        customer.id,
        estimate.months_elapsed,
        estimate.months_remaining,
        estimate.amount,
    )

    nominative = replace(
        customer.nominative,
        loan_type=LoanType.TOPUP,
        loan_date=today,
        disbursement_date=today,
        spk_code="",
        repayment_type=RepaymentType.TOPUP,
        repayment_amount=estimate.amount,
        loan_amount=ZERO,
        admin_fee=ZERO,
        provision_fee=ZERO,
        marketing_fee=ZERO,
        risk_reserve=ZERO,
        flagging_fee=ZERO,
        monthly_installment=ZERO,
        maturity_date=None,
    )

    return replace(
        customer,
        nominative=nominative,
        documents=list(customer.documents),
        status=CustomerStatus.ACTIVE,
        resolution_date=None,
        resolution_amount=None,
        resolution_notes=None,
    )
