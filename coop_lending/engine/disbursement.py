"""Fee defaults, net disbursement and debt-to-income calculations."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from coop_lending.config import FeePolicy, RiskPolicy
from coop_lending.engine.amounts import ZERO, round_currency, round_percent, safe_divide, to_amount, to_int
from coop_lending.models.lending.nominative import NominativeData


@dataclass(frozen=True)
class DisbursementBreakdown:
    """Deductions taken from a loan and the amount paid out to the borrower."""

    loan_amount: Decimal
    total_monthly_payment: Decimal  # installment + mandatory savings
    upfront_deductions: Decimal  # risk reserve + admin + provision + principal savings
    prepaid_installments: Decimal  # blocked installment count x total monthly payment
    other_allocations: Decimal  # blocked SK amount + flagging + prior loan payoff
    marketing_fee: Decimal
    net_received: Decimal

    @property
    def total_deductions(self) -> Decimal:
        return (
            self.upfront_deductions
            + self.prepaid_installments
            + self.other_allocations
            + self.marketing_fee
        )


@dataclass(frozen=True)
class DebtToIncome:
    """Installment as a percentage of pension salary."""

    ratio: Decimal
    is_high: bool


def calculate_disbursement(nominative: NominativeData) -> DisbursementBreakdown:
    """Compute the net amount received from the current loan terms.

    This is the single source of truth for net disbursement; the result is
    never stored on the record.
    """
    loan_amount = to_amount(nominative.loan_amount)
    total_monthly_payment = to_amount(nominative.monthly_installment) + to_amount(
        nominative.mandatory_savings
    )
    upfront_deductions = (
        to_amount(nominative.risk_reserve)
        + to_amount(nominative.admin_fee)
        + to_amount(nominative.provision_fee)
        + to_amount(nominative.principal_savings)
    )
    prepaid_installments = to_int(nominative.blocked_installment_count) * total_monthly_payment
    other_allocations = (
        to_amount(nominative.blocked_amount_sk)
        + to_amount(nominative.flagging_fee)
        + to_amount(nominative.repayment_amount)
    )
    marketing_fee = to_amount(nominative.marketing_fee)

    net_received = (
        loan_amount
        - upfront_deductions
        - prepaid_installments
        - other_allocations
        - marketing_fee
    )

    return DisbursementBreakdown(
        loan_amount=loan_amount,
        total_monthly_payment=total_monthly_payment,
        upfront_deductions=upfront_deductions,
        prepaid_installments=prepaid_installments,
        other_allocations=other_allocations,
        marketing_fee=marketing_fee,
        net_received=net_received,
    )


def net_received(nominative: NominativeData) -> Decimal:
    """Shortcut for ``calculate_disbursement(nominative).net_received``."""
    return calculate_disbursement(nominative).net_received


def suggest_fees(principal: Any, policy: FeePolicy | None = None) -> dict[str, Decimal]:
    """Advisory fee and savings defaults for a principal.

    Returns a mapping of ``NominativeData`` field names to amounts; all
    zero when the principal is not positive.
    """
    policy = policy or FeePolicy()
    principal = to_amount(principal)
    if principal <= 0:
        return {
            "admin_fee": ZERO,
            "provision_fee": ZERO,
            "marketing_fee": ZERO,
            "risk_reserve": ZERO,
            "principal_savings": ZERO,
            "mandatory_savings": ZERO,
        }
    return {
        "admin_fee": round_currency(principal * policy.admin_rate),
        "provision_fee": round_currency(principal * policy.provision_rate),
        "marketing_fee": round_currency(principal * policy.marketing_rate),
        "risk_reserve": round_currency(principal * policy.risk_reserve_rate),
        "principal_savings": policy.principal_savings,
        "mandatory_savings": policy.mandatory_savings,
    }


def debt_to_income(
    installment: Any,
    salary: Any,
    policy: RiskPolicy | None = None,
) -> DebtToIncome:
    """Compute the debt burden ratio; advisory only, never blocks saving."""
    policy = policy or RiskPolicy()
    ratio = safe_divide(to_amount(installment), to_amount(salary)) * 100
    return DebtToIncome(ratio=round_percent(ratio), is_high=ratio > policy.high_dbr_threshold)
