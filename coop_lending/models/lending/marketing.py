"""Marketing target model for lending domain."""

from dataclasses import dataclass, field
from decimal import Decimal

# Fixed day-of-month buckets, independent of weekday alignment
WEEK_BUCKETS: tuple[tuple[int, int], ...] = ((1, 7), (8, 14), (15, 21), (22, 28), (29, 31))


@dataclass
class MarketingTarget:
    """Monthly disbursement target of a loan officer."""

    id: str
    name: str
    branch: str = ""
    noa: int = 0  # number of accounts goal
    target_amount: Decimal = Decimal("0")
    period: str = ""  # e.g. "Desember 2025"
    daily_realization: dict[str, Decimal] = field(default_factory=dict)  # "1".."31"

    @property
    def week_totals(self) -> list[Decimal]:
        """Realized amounts summed over the five fixed day buckets."""
        totals = [Decimal("0")] * len(WEEK_BUCKETS)
        for day, amount in self.daily_realization.items():
            try:
                day_num = int(day)
            except (TypeError, ValueError):
                continue
            for idx, (first, last) in enumerate(WEEK_BUCKETS):
                if first <= day_num <= last:
                    totals[idx] += amount
                    break
        return totals

    @property
    def realization(self) -> Decimal:
        return sum(self.week_totals, Decimal("0"))

    @property
    def remaining(self) -> Decimal:
        return self.target_amount - self.realization

    @property
    def achievement_pct(self) -> Decimal:
        """Realization as a percentage of target, 0 when no target is set."""
        if self.target_amount <= 0:
            return Decimal("0")
        return self.realization / self.target_amount * 100
