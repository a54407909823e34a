"""Service layer exports."""
from venue_pricing.services import (
    ruleset_service,
    pricing_service,
    rule_service,
    scenario_service,
    surge_service,
)

__all__ = [
    "pricing_service",
    "rule_service",
    "ruleset_service",
    "scenario_service",
    "surge_service",
]
