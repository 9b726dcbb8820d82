"""Environmental context estimation and turn risk scoring."""

from route_hazards.scoring.environment import (
    EnvironmentEstimator,
    FixedEnvironmentEstimator,
    SeededEnvironmentEstimator,
    UrbanProximityEstimator,
    is_urban,
)
from route_hazards.scoring.models import (
    EnvironmentalContext,
    RoadSurface,
    TurnRisk,
    TurnSeverity,
    Visibility,
)
from route_hazards.scoring.risk import (
    TurnRiskScorer,
    classify_severity,
    risk_category,
    safe_turn_speed,
)

__all__ = [
    "EnvironmentEstimator",
    "EnvironmentalContext",
    "FixedEnvironmentEstimator",
    "RoadSurface",
    "SeededEnvironmentEstimator",
    "TurnRisk",
    "TurnRiskScorer",
    "TurnSeverity",
    "UrbanProximityEstimator",
    "Visibility",
    "classify_severity",
    "is_urban",
    "risk_category",
    "safe_turn_speed",
]
