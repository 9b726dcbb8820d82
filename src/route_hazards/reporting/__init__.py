"""Route-safety advisories and report output."""

from route_hazards.reporting.formatter import MarkdownFormatter
from route_hazards.reporting.models import Priority, Recommendation
from route_hazards.reporting.recommendations import RecommendationGenerator

__all__ = [
    "MarkdownFormatter",
    "Priority",
    "Recommendation",
    "RecommendationGenerator",
]
