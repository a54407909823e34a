"""Schema exports."""

from venue_pricing.schemas.pricing import (
    LayerRead,
    LayerResultRead,
    LayerToggleRead,
    LayerToggleRequest,
    TimelineContext,
    TimelineRead,
    TimelineRequest,
    TimelineSummaryRead,
    TimeSlotRead,
)
from venue_pricing.schemas.pricing_rule import (
    PricingRuleRead,
    RuleStatusAction,
    RuleStatusUpdate,
    TimeWindowSchema,
)
from venue_pricing.schemas.scenario import (
    PricingCoefficientsSchema,
    ScenarioConfig,
    ScenarioCreate,
    ScenarioDiffRead,
    ScenarioDiffRequest,
    ScenarioLoadRead,
    ScenarioLoadRequest,
    ScenarioRead,
    ScenarioUpdate,
    ScenarioWindow,
)
from venue_pricing.schemas.surge import (
    SurgeCalculationRead,
    SurgeMaterializeRequest,
    SurgeParameters,
)

__all__ = [
    "LayerRead",
    "LayerResultRead",
    "LayerToggleRead",
    "LayerToggleRequest",
    "PricingCoefficientsSchema",
    "PricingRuleRead",
    "RuleStatusAction",
    "RuleStatusUpdate",
    "ScenarioConfig",
    "ScenarioCreate",
    "ScenarioDiffRead",
    "ScenarioDiffRequest",
    "ScenarioLoadRead",
    "ScenarioLoadRequest",
    "ScenarioRead",
    "ScenarioUpdate",
    "ScenarioWindow",
    "SurgeCalculationRead",
    "SurgeMaterializeRequest",
    "SurgeParameters",
    "TimeSlotRead",
    "TimeWindowSchema",
    "TimelineContext",
    "TimelineRead",
    "TimelineRequest",
    "TimelineSummaryRead",
]
