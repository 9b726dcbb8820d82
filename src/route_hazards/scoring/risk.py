"""Turn risk scoring — geometry, terrain, safe-speed physics and environment."""

from __future__ import annotations

import math

from route_hazards.geometry.models import TurnCandidate
from route_hazards.scoring.models import EnvironmentalContext, TurnRisk, TurnSeverity

BASE_RISK = 3.0
MIN_RISK = 1.0
MAX_RISK = 10.0

FRICTION_COEFFICIENT = 0.7  # dry pavement
GRAVITY = 9.81  # m/s²
SAFETY_FACTOR = 0.8
_MPS_TO_KPH = 3.6

MIN_SAFE_SPEED_KPH = 15
MAX_SAFE_SPEED_KPH = 80

CRITICAL_RISK = 8.0

# (exclusive lower bound, points)
_ANGLE_TIERS = ((135, 4), (90, 3), (60, 2), (30, 1))
# (exclusive upper bound in metres, points)
_RADIUS_TIERS = ((75, 3), (150, 2), (250, 1))
# (inclusive upper bound in km/h, points)
_SPEED_TIERS = ((25, 2), (40, 1))
_TERRAIN_RISK = {"hilly": 1.0, "rural": 0.5}

_ANGLE_SPEED_FACTORS = ((120, 0.6), (90, 0.7), (60, 0.8), (30, 0.9))


def safe_turn_speed(angle: float, radius_m: float) -> float:
    """Physics-based safe speed (km/h) for a curve.

    ``v = sqrt(μ g r s) * 3.6`` further reduced for sharper angles, rounded to
    a whole km/h and clamped to [15, 80].
    """
    max_speed = math.sqrt(FRICTION_COEFFICIENT * GRAVITY * radius_m * SAFETY_FACTOR) * _MPS_TO_KPH

    factor = 1.0
    for bound, f in _ANGLE_SPEED_FACTORS:
        if angle > bound:
            factor = f
            break

    return float(max(MIN_SAFE_SPEED_KPH, min(MAX_SAFE_SPEED_KPH, round(max_speed * factor))))


def classify_severity(risk_score: float) -> TurnSeverity:
    """Map a final risk score to a :class:`TurnSeverity` (8.5 / 6.5 / 4.5 cut-offs)."""
    if risk_score >= 8.5:
        return TurnSeverity.HAIRPIN
    if risk_score >= 6.5:
        return TurnSeverity.SHARP
    if risk_score >= 4.5:
        return TurnSeverity.MODERATE
    return TurnSeverity.GENTLE


def risk_category(risk_score: float) -> str:
    """Coarse risk band used for filtering and summary counts."""
    if risk_score >= CRITICAL_RISK:
        return "critical"
    if risk_score >= 6:
        return "high"
    if risk_score >= 4:
        return "medium"
    return "low"


def is_critical(risk_score: float) -> bool:
    return risk_score >= CRITICAL_RISK


class TurnRiskScorer:
    """Combine turn geometry with terrain and environmental context."""

    def score(
        self,
        candidate: TurnCandidate,
        terrain: str | None,
        context: EnvironmentalContext,
    ) -> TurnRisk:
        """Return a :class:`TurnRisk` for *candidate*.

        Args:
            candidate: Output of the turn geometry analyzer.
            terrain: Route terrain tag; ``'hilly'`` and ``'rural'`` add risk.
            context: Environmental attributes at the turn location.
        """
        risk = BASE_RISK

        for bound, points in _ANGLE_TIERS:
            if candidate.angle > bound:
                risk += points
                break

        for bound, points in _RADIUS_TIERS:
            if candidate.radius_m < bound:
                risk += points
                break

        risk += _TERRAIN_RISK.get((terrain or "").lower(), 0.0)

        speed = safe_turn_speed(candidate.angle, candidate.radius_m)
        for bound, points in _SPEED_TIERS:
            if speed <= bound:
                risk += points
                break

        risk += context.additional_risk

        risk = round(max(MIN_RISK, min(MAX_RISK, risk)), 1)

        return TurnRisk(
            risk_score=risk,
            severity=classify_severity(risk),
            recommended_speed=speed,
            visibility=context.visibility,
            road_surface=context.road_surface,
            guardrails=context.guardrails,
            warning_signs=context.warning_signs,
            lighting=context.lighting,
        )
