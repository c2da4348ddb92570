"""Financial derivation engine: pure functions over loan terms."""

from coop_lending.engine.amounts import MAX_AMOUNT, round_currency, safe_divide, to_amount, to_int
from coop_lending.engine.disbursement import (
    DebtToIncome,
    DisbursementBreakdown,
    calculate_disbursement,
    debt_to_income,
    net_received,
    suggest_fees,
)
from coop_lending.engine.installment import (
    add_months,
    calculate_installment,
    calculate_maturity_date,
    derive_terms,
    equivalent_flat_rate,
    months_between,
)

__all__ = [
    "DebtToIncome",
    "DisbursementBreakdown",
    "MAX_AMOUNT",
    "add_months",
    "calculate_disbursement",
    "calculate_installment",
    "calculate_maturity_date",
    "debt_to_income",
    "derive_terms",
    "equivalent_flat_rate",
    "months_between",
    "net_received",
    "round_currency",
    "safe_divide",
    "suggest_fees",
    "to_amount",
    "to_int",
]
