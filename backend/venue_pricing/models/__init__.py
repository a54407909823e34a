"""ORM models package export."""

from venue_pricing.models.hierarchy import Customer, Event, Location, SubLocation
from venue_pricing.models.pricing_rule import PricingRule
from venue_pricing.models.scenario import PricingScenario
from venue_pricing.models.surge_config import SurgeConfig

__all__ = [
    "Customer",
    "Event",
    "Location",
    "PricingRule",
    "PricingScenario",
    "SubLocation",
    "SurgeConfig",
]
