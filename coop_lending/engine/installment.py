"""Installment, maturity and term derivation for loan contracts."""

import calendar
from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal
from typing import Any

from coop_lending.engine.amounts import (
    ZERO,
    round_currency,
    round_percent,
    safe_divide,
    to_amount,
    to_int,
)
from coop_lending.models.lending.enums import InterestType
from coop_lending.models.lending.nominative import NominativeData


def calculate_installment(
    principal: Any,
    rate: Any,
    tenure_months: Any,
    interest_type: InterestType | str = InterestType.ANNUITY,
) -> Decimal:
    """Calculate the monthly installment of a loan.

    Parameters
    ----------
    principal : Any
        Loan amount (plafon).
    rate : Any
        Interest rate in percent. Annual for ANNUITY, monthly for FLAT.
    tenure_months : Any
        Number of monthly installments.
    interest_type : InterestType | str
        Amortization regime.

    Returns
    -------
    Decimal
        Installment rounded to whole currency units, 0 when principal or
        tenure is not positive. A negative rate counts as 0.
    """
    principal = to_amount(principal)
    rate = max(to_amount(rate), ZERO)
    n = to_int(tenure_months)

    if principal <= 0 or n <= 0:
        return ZERO

    try:
        if interest_type == InterestType.FLAT:
            installment = principal / n + principal * rate / 100
        else:
            monthly_rate = rate / 100 / 12
            if monthly_rate == 0:
                installment = principal / n
            else:
                installment = principal * monthly_rate / (1 - (1 + monthly_rate) ** -n)
    except ArithmeticError:
        return ZERO

    return round_currency(installment)


def equivalent_flat_rate(principal: Any, installment: Any, tenure_months: Any) -> Decimal:
    """Monthly flat rate (percent) producing the same total interest.

    Informational only; shown next to annuity loans.
    """
    principal = to_amount(principal)
    installment = to_amount(installment)
    n = to_int(tenure_months)
    if principal <= 0 or n <= 0:
        return ZERO
    monthly_interest = (installment * n - principal) / n
    return round_percent(safe_divide(monthly_interest, principal) * 100)


def add_months(start: date, months: int) -> date:
    """Add calendar months, keeping the day of month.

    When the day does not exist in the target month the surplus days roll
    over into the following month (Jan 31 + 1 month -> Mar 3 in a common
    year).
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    if start.day <= last_day:
        return start.replace(year=year, month=month)
    return date(year, month, last_day) + timedelta(days=start.day - last_day)


def months_between(start: date, end: date) -> int:
    """Whole calendar months from ``start`` to ``end``.

    A partial month (end day-of-month before start day-of-month) does not
    count. Negative when ``end`` precedes ``start``.
    """
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return months


def calculate_maturity_date(disbursement_date: date | None, tenure_months: Any) -> date | None:
    """Get the scheduled payoff date, or None without a date or tenure.

    None as well when the payoff would fall outside the calendar range.
    """
    n = to_int(tenure_months)
    if disbursement_date is None or n <= 0:
        return None
    try:
        return add_months(disbursement_date, n)
    except (ValueError, OverflowError):
        return None


def derive_terms(nominative: NominativeData) -> NominativeData:
    """Return a copy of the loan terms with derived fields recomputed.

    Installment and maturity follow principal, rate, regime, tenure and
    disbursement date. Without a positive principal and tenure both are
    cleared.
    """
    principal = to_amount(nominative.loan_amount)
    tenure = to_int(nominative.tenure_months)

    if principal <= 0 or tenure <= 0:
        return replace(nominative, monthly_installment=ZERO, maturity_date=None)

    return replace(
        nominative,
        monthly_installment=calculate_installment(
            principal, nominative.interest_rate, tenure, nominative.interest_type
        ),
        maturity_date=calculate_maturity_date(nominative.disbursement_date, tenure),
    )
