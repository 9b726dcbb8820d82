"""Prioritized route-safety advisories from turn and blind-spot results."""

from __future__ import annotations

from route_hazards.reporting.models import Priority, Recommendation
from route_hazards.scoring.risk import is_critical
from route_hazards.storage.models import BlindSpot, SharpTurn

_CRITICAL_ACTIONS = [
    "MANDATORY: Reduce speed to 25-35 km/h in all identified critical areas",
    "Use convoy travel with lead vehicle communication system",
    "Install additional warning lights and communication equipment",
    "Consider alternative route planning to avoid critical sections",
    "Conduct detailed route briefing before departure",
]

_SHARP_TURN_ACTIONS = [
    "Reduce speed to recommended limits before entering turns",
    "Use engine braking instead of heavy braking in turns",
    "Position vehicle for maximum sight distance around curves",
    "Never attempt overtaking in curved sections",
    "Use horn signals when approaching blind curves",
]

_GENERAL_ACTIONS = [
    "Conduct thorough pre-journey route briefing with all drivers",
    "Ensure all vehicle lights, signals, and horns are fully functional",
    "Carry satellite communication equipment for emergency contact",
    "Establish regular check-in points every 50km",
    "Monitor weather conditions - postpone travel during fog, heavy rain, or poor visibility",
    "Maintain emergency kit with reflectors, flares, and warning triangles",
    "Use dashcam recording for post-journey analysis and training",
]


class RecommendationGenerator:
    """Build the ordered advisory list for an analysed route.

    Output order is fixed: a CRITICAL block (only if a critical hazard
    exists), a HIGH sharp-turn block (only if turns exist), the blind-spot
    analyzer's own advisories, and finally the STANDARD protocol, which is
    always present.
    """

    def generate(
        self,
        turns: list[SharpTurn],
        blind_spots: list[BlindSpot],
        blind_spot_recommendations: list[dict] | None = None,
    ) -> list[Recommendation]:
        recommendations: list[Recommendation] = []

        critical_turns = [t for t in turns if is_critical(t.risk_score)]
        critical_spots = [s for s in blind_spots if is_critical(s.risk_score)]
        total_critical = len(critical_turns) + len(critical_spots)

        if total_critical > 0:
            recommendations.append(Recommendation(
                priority=Priority.CRITICAL.value,
                category="immediate_action",
                title=f"{total_critical} Critical Visibility Hazards Detected",
                description=(
                    f"{len(critical_turns)} dangerous sharp turns and "
                    f"{len(critical_spots)} critical blind spots require immediate attention"
                ),
                actions=list(_CRITICAL_ACTIONS),
            ))

        if turns:
            mean_angle = sum(t.turn_angle for t in turns) / len(turns)
            recommendations.append(Recommendation(
                priority=Priority.HIGH.value,
                category="sharp_turns",
                title=f"Sharp Turn Management ({len(turns)} turns detected)",
                description=(
                    f"Average turn angle: {mean_angle:.1f}°. "
                    "Requires specialized driving techniques."
                ),
                actions=list(_SHARP_TURN_ACTIONS),
            ))

        for rec in blind_spot_recommendations or []:
            recommendations.append(Recommendation(
                priority=rec.get("priority") or Priority.HIGH.value,
                category=rec.get("category") or "blind_spots",
                title=rec.get("title") or "Blind Spot Safety",
                description=rec.get("description") or "",
                actions=list(rec.get("actions") or []),
            ))

        recommendations.append(Recommendation(
            priority=Priority.STANDARD.value,
            category="general_safety",
            title="Mandatory Route Safety Protocol",
            description="Essential safety measures for all identified visibility hazards",
            actions=list(_GENERAL_ACTIONS),
        ))

        return recommendations
