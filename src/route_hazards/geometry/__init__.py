"""Route geometry primitives and turn detection."""

from route_hazards.geometry.analyzer import TurnGeometryAnalyzer
from route_hazards.geometry.models import RoutePoint, TurnCandidate, TurnDirection, Vector2D
from route_hazards.geometry.primitives import (
    distance_km,
    radius_from_chord_and_angle,
    vector_angle_degrees,
    with_cumulative_distances,
)

__all__ = [
    "RoutePoint",
    "TurnCandidate",
    "TurnDirection",
    "TurnGeometryAnalyzer",
    "Vector2D",
    "distance_km",
    "radius_from_chord_and_angle",
    "vector_angle_degrees",
    "with_cumulative_distances",
]
