"""Loan lifecycle: status transitions and top-up refinancing."""

from coop_lending.lifecycle.topup import PayoffEstimate, build_topup_draft, estimate_payoff
from coop_lending.lifecycle.transitions import (
    DisplayStatus,
    amend_resolution,
    apply_transition,
    display_status,
    revert_to_active,
    settlement_category,
    suggest_settlement_amount,
)

__all__ = [
    "DisplayStatus",
    "PayoffEstimate",
    "amend_resolution",
    "apply_transition",
    "build_topup_draft",
    "display_status",
    "estimate_payoff",
    "revert_to_active",
    "settlement_category",
    "suggest_settlement_amount",
]
