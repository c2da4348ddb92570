"""Faker-based sample data generators."""

from coop_lending.generators.base import BaseGenerator
from coop_lending.generators.customer import CustomerGenerator
from coop_lending.generators.marketing import MarketingTargetGenerator

__all__ = ["BaseGenerator", "CustomerGenerator", "MarketingTargetGenerator"]
