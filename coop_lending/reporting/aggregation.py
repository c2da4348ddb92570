"""Dashboard aggregations over the customer collection.

All functions are pure folds over a snapshot of records. Time windows are
evaluated against the disbursement date, never the creation date.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum

from coop_lending.engine.amounts import ZERO, safe_divide, to_amount
from coop_lending.engine.disbursement import net_received
from coop_lending.models.lending import Customer, CustomerStatus


class Window(str, Enum):
    WEEK = "WEEK"
    MONTH = "MONTH"
    YEAR = "YEAR"


class InstitutionBucket(str, Enum):
    POS = "POS"
    SMBC = "SMBC"
    BRI = "BRI"
    MANTAP = "MANTAP"
    DP_TASPEN = "DP_TASPEN"
    OTHER = "OTHER"


@dataclass(frozen=True)
class InstitutionRule:
    """Substring rule mapping a paying institution to a dashboard bucket."""

    bucket: InstitutionBucket
    substrings: tuple[str, ...]
    exclusions: tuple[str, ...] = ()

    def matches(self, institution: str) -> bool:
        name = institution.lower()
        if any(excluded in name for excluded in self.exclusions):
            return False
        return any(fragment in name for fragment in self.substrings)


# Evaluated in order; first match wins
DEFAULT_INSTITUTION_RULES: tuple[InstitutionRule, ...] = (
    InstitutionRule(InstitutionBucket.POS, ("pos",)),
    InstitutionRule(InstitutionBucket.SMBC, ("smbc", "btpn")),
    InstitutionRule(InstitutionBucket.BRI, ("bri",), exclusions=("asabri",)),
    InstitutionRule(InstitutionBucket.MANTAP, ("mantap",)),
    InstitutionRule(InstitutionBucket.DP_TASPEN, ("dp taspen", "dp-taspen")),
)


class InstitutionClassifier:
    """Classify paying institutions with an ordered rule table."""

    def __init__(
        self,
        rules: Sequence[InstitutionRule] = DEFAULT_INSTITUTION_RULES,
        fallback: InstitutionBucket = InstitutionBucket.OTHER,
    ) -> None:
        self.rules = tuple(rules)
        self.fallback = fallback

    def classify(self, institution: str | None) -> InstitutionBucket:
        name = institution or ""
        for rule in self.rules:
            if rule.matches(name):
                return rule.bucket
        return self.fallback


@dataclass(frozen=True)
class DashboardTotals:
    """Headline disbursement figures; cancelled loans are excluded."""

    week_net: Decimal
    month_net: Decimal
    year_principal: Decimal
    portfolio_count: int
    total_principal: Decimal

    @property
    def average_loan_size(self) -> Decimal:
        return safe_divide(self.total_principal, Decimal(self.portfolio_count))


@dataclass(frozen=True)
class MarketingSummary:
    """Production attributed to one loan officer."""

    name: str
    customer_count: int
    total_principal: Decimal
    total_net: Decimal


def start_of_week(today: date) -> date:
    """Most recent Sunday on or before ``today``."""
    return today - timedelta(days=(today.weekday() + 1) % 7)


def start_of_month(today: date) -> date:
    return today.replace(day=1)


def start_of_year(today: date) -> date:
    return date(today.year, 1, 1)


def window_start(window: Window, today: date) -> date:
    if window == Window.WEEK:
        return start_of_week(today)
    if window == Window.MONTH:
        return start_of_month(today)
    return start_of_year(today)


def in_window(customer: Customer, window: Window, today: date) -> bool:
    """Whether the loan was disbursed on or after the window start."""
    disbursed = customer.nominative.disbursement_date
    return disbursed is not None and disbursed >= window_start(window, today)


def counts_toward_disbursement(customer: Customer) -> bool:
    return customer.status != CustomerStatus.CANCELLED


def disbursement_totals(customers: Iterable[Customer], today: date) -> DashboardTotals:
    """Net disbursed this week and month, principal this year."""
    week_net = ZERO
    month_net = ZERO
    year_principal = ZERO
    total_principal = ZERO
    count = 0

    for customer in customers:
        if not counts_toward_disbursement(customer):
            continue
        principal = to_amount(customer.nominative.loan_amount)
        count += 1
        total_principal += principal

        if customer.nominative.disbursement_date is None:
            continue
        net = net_received(customer.nominative)
        if in_window(customer, Window.WEEK, today):
            week_net += net
        if in_window(customer, Window.MONTH, today):
            month_net += net
        if in_window(customer, Window.YEAR, today):
            year_principal += principal

    return DashboardTotals(
        week_net=week_net,
        month_net=month_net,
        year_principal=year_principal,
        portfolio_count=count,
        total_principal=total_principal,
    )


def count_by_institution(
    customers: Iterable[Customer],
    classifier: InstitutionClassifier | None = None,
    active_only: bool = False,
) -> dict[InstitutionBucket, int]:
    """Headcount per paying-institution bucket.

    Every status is counted unless ``active_only`` is set.
    """
    classifier = classifier or InstitutionClassifier()
    counts = {bucket: 0 for bucket in InstitutionBucket}
    for customer in customers:
        if active_only and not customer.is_active:
            continue
        counts[classifier.classify(customer.pension.former_institution)] += 1
    return counts


def totals_by_marketing(
    customers: Iterable[Customer],
    today: date | None = None,
    window: Window | None = None,
) -> list[MarketingSummary]:
    """Principal and net disbursed per loan officer, largest net first.

    Unattributed loans are grouped under ``"-"``. With a ``window`` only
    loans disbursed inside it (relative to ``today``) are counted.
    """
    if window is not None and today is None:
        today = date.today()

    groups: dict[str, list[Customer]] = {}
    for customer in customers:
        if not counts_toward_disbursement(customer):
            continue
        if window is not None and not in_window(customer, window, today):
            continue
        name = (customer.marketing_name or "").strip() or "-"
        groups.setdefault(name, []).append(customer)

    summaries = [
        MarketingSummary(
            name=name,
            customer_count=len(members),
            total_principal=sum((to_amount(c.nominative.loan_amount) for c in members), ZERO),
            total_net=sum((net_received(c.nominative) for c in members), ZERO),
        )
        for name, members in groups.items()
    ]
    return sorted(summaries, key=lambda s: (-s.total_net, s.name))


def status_counts(customers: Iterable[Customer]) -> dict[CustomerStatus, int]:
    counts = {status: 0 for status in CustomerStatus}
    for customer in customers:
        counts[customer.status] += 1
    return counts


def resolved_customers(
    customers: Iterable[Customer],
    status: CustomerStatus | None = None,
) -> list[Customer]:
    """Customers whose loan is no longer ACTIVE, optionally of one status."""
    return [
        c for c in customers
        if not c.is_active and (status is None or c.status == status)
    ]


def search_customers(customers: Iterable[Customer], term: str) -> list[Customer]:
    """Match name (case-insensitive), NOPEN, NIK, SK number or SPK code."""
    needle = (term or "").strip().lower()
    if not needle:
        return list(customers)
    results = []
    for c in customers:
        haystack = (
            c.personal.full_name,
            c.pension.pension_number,
            c.personal.nik,
            c.pension.sk_number,
            c.nominative.spk_code,
        )
        if any(needle in (value or "").lower() for value in haystack):
            results.append(c)
    return results
