"""Risk scoring data models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TurnSeverity(str, Enum):
    GENTLE = "gentle"
    MODERATE = "moderate"
    SHARP = "sharp"
    HAIRPIN = "hairpin"


class Visibility(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    LIMITED = "limited"
    POOR = "poor"


class RoadSurface(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


@dataclass(frozen=True)
class EnvironmentalContext:
    """Visibility and infrastructure attributes at a route location."""

    visibility: Visibility = Visibility.GOOD
    road_surface: RoadSurface = RoadSurface.GOOD
    guardrails: bool = False
    warning_signs: bool = False
    lighting: bool = False

    additional_risk: float = 0.0
    """Risk points added on top of the geometric score."""


@dataclass
class TurnRisk:
    """Scored assessment of a single turn candidate."""

    risk_score: float
    """Combined hazard score [1, 10], rounded to 0.1."""

    severity: TurnSeverity

    recommended_speed: float
    """Safe traversal speed in km/h [15, 80]."""

    visibility: Visibility
    road_surface: RoadSurface
    guardrails: bool
    warning_signs: bool
    lighting: bool
