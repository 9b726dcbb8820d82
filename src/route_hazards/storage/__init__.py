"""SQLite persistence for routes and visibility hazards."""

from route_hazards.storage.models import (
    AnalysisMethod,
    BlindSpot,
    BlindSpotSeverity,
    Route,
    SharpTurn,
    SpotType,
)
from route_hazards.storage.storage import RISK_LEVELS, SORT_ORDERS, HazardStorage

__all__ = [
    "RISK_LEVELS",
    "SORT_ORDERS",
    "AnalysisMethod",
    "BlindSpot",
    "BlindSpotSeverity",
    "HazardStorage",
    "Route",
    "SharpTurn",
    "SpotType",
]
