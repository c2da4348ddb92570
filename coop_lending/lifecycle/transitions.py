"""Loan lifecycle state machine for customer records.

Every loan starts ACTIVE. A resolution moves it to one of the terminal
statuses and attaches a resolution record (date, amount, notes) in a single
step; an administrative revert clears the record and restores ACTIVE.
Functions return new ``Customer`` objects and never mutate their input.
"""

import logging
from collections.abc import Sequence
from dataclasses import replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from coop_lending.config import RiskPolicy
from coop_lending.engine.amounts import ZERO, round_currency, to_amount
from coop_lending.exceptions import DocumentLimitError, InvalidTransitionError
from coop_lending.models.lending import Customer, CustomerDocument, CustomerStatus, DocumentCategory
from coop_lending.models.lending.document import SETTLEMENT_CATEGORIES, category_limit

logger = logging.getLogger(__name__)

RESOLVED_STATUSES = frozenset(status for status in CustomerStatus if status != CustomerStatus.ACTIVE)

# Statuses whose resolution record carries a settlement amount
AMOUNT_BEARING_STATUSES = frozenset({CustomerStatus.PKA, CustomerStatus.SETTLED_PLAIN})


class DisplayStatus(str, Enum):
    """Status shown in listings; MATURED is derived, never stored."""

    ACTIVE = "ACTIVE"
    MATURED = "MATURED"
    PKA = "PKA"
    SETTLED_VIA_TOPUP = "SETTLED_VIA_TOPUP"
    SETTLED_PLAIN = "SETTLED_PLAIN"
    CANCELLED = "CANCELLED"
    DECEASED = "DECEASED"


def suggest_settlement_amount(
    customer: Customer,
    status: CustomerStatus,
    policy: RiskPolicy | None = None,
) -> Decimal:
    """Placeholder settlement amount offered to the user.

    PKA suggests a fixed share of principal and plain settlement the full
    principal. Neither is an actuarial payoff figure.
    """
    policy = policy or RiskPolicy()
    principal = to_amount(customer.nominative.loan_amount)
    if status == CustomerStatus.PKA:
        return round_currency(principal * policy.pka_settlement_ratio)
    if status == CustomerStatus.SETTLED_PLAIN:
        return round_currency(principal * policy.plain_settlement_ratio)
    return ZERO


def apply_transition(
    customer: Customer,
    status: CustomerStatus,
    effective_date: date | None,
    amount: Any = None,
    notes: str = "",
    documents: Sequence[CustomerDocument] | None = None,
    policy: RiskPolicy | None = None,
) -> Customer:
    """Resolve an ACTIVE loan.

    Parameters
    ----------
    customer : Customer
        Record to resolve; must be ACTIVE.
    status : CustomerStatus
        Target status, any status other than ACTIVE.
    effective_date : date | None
        User-supplied resolution date; required.
    amount : Any
        Settlement amount for PKA and SETTLED_PLAIN. When None the
        suggested default is used. Forced to 0 for every other status.
    notes : str
        Free-text notes (heir information for DECEASED).
    documents : Sequence[CustomerDocument] | None
        Proof-of-resolution uploads. When given, existing settlement and
        death-certificate documents are replaced by these.
    policy : RiskPolicy | None
        Source of the suggested settlement ratios.

    Returns
    -------
    Customer
        Resolved copy of the record.

    Raises
    ------
    InvalidTransitionError
        If the record is not ACTIVE, the target is ACTIVE, or no date is given.
    """
    if not customer.is_active:
        raise InvalidTransitionError(
            f"Customer {customer.id} is {customer.status.value}; only ACTIVE loans can be resolved"
        )
    resolved = _resolve(customer, status, effective_date, amount, notes, documents, policy)
    logger.info("Customer %s moved ACTIVE -> %s", customer.id, status.value)
    return resolved


def amend_resolution(
    customer: Customer,
    status: CustomerStatus,
    effective_date: date | None,
    amount: Any = None,
    notes: str = "",
    documents: Sequence[CustomerDocument] | None = None,
    policy: RiskPolicy | None = None,
) -> Customer:
    """Correct the resolution record of an already resolved loan.

    Same rules as ``apply_transition`` but the source must be resolved.
    When ``amount`` is None the stored amount is kept for amount-bearing
    statuses.
    """
    if customer.is_active:
        raise InvalidTransitionError(f"Customer {customer.id} is ACTIVE; nothing to amend")
    if amount is None and status in AMOUNT_BEARING_STATUSES and customer.resolution_amount is not None:
        amount = customer.resolution_amount
    amended = _resolve(customer, status, effective_date, amount, notes, documents, policy)
    logger.info(
        "Customer %s resolution amended %s -> %s",
        customer.id,
        customer.status.value,
        status.value,
    )
    return amended


def revert_to_active(customer: Customer) -> Customer:
    """Administrative correction: restore ACTIVE and clear the resolution.

    Settlement-proof and death-certificate documents are dropped; all other
    documents and the loan terms are untouched.
    """
    if customer.is_active:
        raise InvalidTransitionError(f"Customer {customer.id} is already ACTIVE")
    logger.info("Customer %s reverted %s -> ACTIVE", customer.id, customer.status.value)
    return replace(
        customer,
        status=CustomerStatus.ACTIVE,
        resolution_date=None,
        resolution_amount=None,
        resolution_notes=None,
        documents=[doc for doc in customer.documents if doc.category not in SETTLEMENT_CATEGORIES],
    )


def display_status(customer: Customer, today: date) -> DisplayStatus:
    """Listing label; ACTIVE loans past maturity show as MATURED."""
    if customer.is_active:
        maturity = customer.nominative.maturity_date
        if maturity is not None and today > maturity:
            return DisplayStatus.MATURED
        return DisplayStatus.ACTIVE
    return DisplayStatus(customer.status.value)


def settlement_category(status: CustomerStatus) -> DocumentCategory:
    """Document category used as proof for a resolution status."""
    if status == CustomerStatus.DECEASED:
        return DocumentCategory.SURAT_KEMATIAN
    return DocumentCategory.BUKTI_LUNAS


def _resolve(
    customer: Customer,
    status: CustomerStatus,
    effective_date: date | None,
    amount: Any,
    notes: str,
    documents: Sequence[CustomerDocument] | None,
    policy: RiskPolicy | None,
) -> Customer:
    if status not in RESOLVED_STATUSES:
        raise InvalidTransitionError(f"Cannot resolve customer {customer.id} to {status.value}")
    if effective_date is None:
        raise InvalidTransitionError(f"A resolution date is required to mark customer {customer.id} {status.value}")

    if status in AMOUNT_BEARING_STATUSES:
        resolution_amount = (
            suggest_settlement_amount(customer, status, policy)
            if amount is None
            else round_currency(amount)
        )
    else:
        resolution_amount = ZERO

    new_documents = customer.documents
    if documents is not None:
        _check_limits(documents)
        kept = [doc for doc in customer.documents if doc.category not in SETTLEMENT_CATEGORIES]
        new_documents = kept + list(documents)

    return replace(
        customer,
        status=status,
        resolution_date=effective_date,
        resolution_amount=resolution_amount,
        resolution_notes=notes or "",
        documents=list(new_documents),
    )


def _check_limits(documents: Sequence[CustomerDocument]) -> None:
    counts: dict[DocumentCategory, int] = {}
    for doc in documents:
        counts[doc.category] = counts.get(doc.category, 0) + 1
    for category, count in counts.items():
        if count > category_limit(category):
            raise DocumentLimitError(
                f"At most {category_limit(category)} {category.value} documents are accepted, got {count}"
            )
