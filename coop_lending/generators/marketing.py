"""Sample monthly marketing targets."""

from __future__ import annotations

import random
from decimal import Decimal
from typing import Iterator

from coop_lending.generators.base import BaseGenerator
from coop_lending.models.lending import MarketingTarget


class MarketingTargetGenerator(BaseGenerator):
    """Generate marketing targets with sparse daily realization."""

    BRANCHES = ["Jakarta", "Bandung", "Semarang", "Surabaya", "Medan"]

    def generate(self, name: str | None = None, period: str = "Januari 2026") -> MarketingTarget:
        target = Decimal(random.randint(5, 40) * 100_000_000)
        days = random.sample(range(1, 32), k=random.randint(3, 12))
        realization = {
            str(day): Decimal(random.randint(10, 150) * 1_000_000)
            for day in sorted(days)
        }
        return MarketingTarget(
            id=self.fake.uuid4(),
            name=name or self.fake.name(),
            branch=random.choice(self.BRANCHES),
            noa=random.randint(5, 40),
            target_amount=target,
            period=period,
            daily_realization=realization,
        )

    def generate_batch(self, names: list[str], period: str = "Januari 2026") -> Iterator[MarketingTarget]:
        """Yield one target per marketing name."""
        for name in names:
            yield self.generate(name, period)
