"""Blind-spot analyzer contract and the storage-backed default.

Sight-distance calculation (elevation profiles, ray tracing, obstruction
lookup) is performed by an external calculator that writes
:class:`~route_hazards.storage.models.BlindSpot` rows.  The orchestrator only
consumes its summary through :class:`BlindSpotAnalyzer`.
"""

from __future__ import annotations

from collections import Counter
from typing import Protocol

from route_hazards.analysis.models import BlindSpotAnalysis
from route_hazards.scoring.risk import is_critical
from route_hazards.storage.models import BlindSpot, SpotType
from route_hazards.storage.storage import HazardStorage


class BlindSpotAnalyzer(Protocol):
    """Anything that can summarise the blind spots of a route.

    Implementations may return a :class:`BlindSpotAnalysis` or the equivalent
    dict (``total_blind_spots``, ``blind_spots``, ``risk_analysis``,
    ``by_type``, ``confidence``, ``recommendations``).
    """

    def analyze_all_blind_spots(self, route_id: str) -> BlindSpotAnalysis | dict: ...


def summarize_blind_spots(spots: list[BlindSpot]) -> BlindSpotAnalysis:
    """Build the analyzer contract from a list of blind spots."""
    if not spots:
        return BlindSpotAnalysis()

    by_type = Counter(s.spot_type.value for s in spots)
    return BlindSpotAnalysis(
        total_blind_spots=len(spots),
        blind_spots=spots,
        risk_score=round(sum(s.risk_score for s in spots) / len(spots), 2),
        critical_count=sum(1 for s in spots if is_critical(s.risk_score)),
        by_type=dict(by_type),
        confidence=0.8,
        recommendations=_type_recommendations(spots),
    )


def _type_recommendations(spots: list[BlindSpot]) -> list[dict]:
    """One advisory per spot type that has at least one high-risk spot."""
    recommendations: list[dict] = []
    for spot_type in SpotType:
        group = [s for s in spots if s.spot_type is spot_type and s.risk_score >= 6]
        if not group:
            continue

        actions: list[str] = []
        for s in sorted(group, key=lambda s: -s.risk_score):
            for advice in s.safety_recommendations():
                if advice not in actions:
                    actions.append(advice)

        worst = min(s.visibility_distance for s in group)
        critical = any(is_critical(s.risk_score) for s in group)
        recommendations.append({
            "priority": "CRITICAL" if critical else "HIGH",
            "category": "blind_spots",
            "title": f"{spot_type.value.title()} Blind Spots ({len(group)} high-risk)",
            "description": (
                f"{len(group)} {spot_type.value} blind spot(s) with sight distance "
                f"down to {worst:.0f} m"
            ),
            "actions": actions,
        })
    return recommendations


class StoredBlindSpotAnalyzer:
    """Summarise blind spots already persisted for a route.

    Parameters
    ----------
    db_path:
        SQLite database shared with the external sight-distance calculator.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def analyze_all_blind_spots(self, route_id: str) -> BlindSpotAnalysis:
        storage = HazardStorage(self._db_path)
        try:
            spots = storage.list_blind_spots(route_id)
        finally:
            storage.close()
        return summarize_blind_spots(spots)
