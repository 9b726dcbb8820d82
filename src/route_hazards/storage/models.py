"""Persisted route and hazard records."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum

from route_hazards.errors import PersistenceError
from route_hazards.geometry.models import RoutePoint, TurnCandidate, TurnDirection
from route_hazards.scoring.models import RoadSurface, TurnRisk, TurnSeverity, Visibility
from route_hazards.scoring.risk import risk_category


class AnalysisMethod(str, Enum):
    """How a hazard record was produced.  The set is closed; storage rejects anything else."""

    GPS_GEOMETRY = "gps_geometry"
    SIGHT_DISTANCE = "sight_distance"
    MANUAL = "manual"


class SpotType(str, Enum):
    CREST = "crest"
    CURVE = "curve"
    INTERSECTION = "intersection"
    OBSTRUCTION = "obstruction"
    VEGETATION = "vegetation"
    STRUCTURE = "structure"


class BlindSpotSeverity(str, Enum):
    MINOR = "minor"
    MODERATE = "moderate"
    SIGNIFICANT = "significant"
    CRITICAL = "critical"


def blind_spot_severity(risk_score: float) -> BlindSpotSeverity:
    """Severity level of a blind spot, derived from its risk score."""
    if risk_score >= 8:
        return BlindSpotSeverity.CRITICAL
    if risk_score >= 6:
        return BlindSpotSeverity.SIGNIFICANT
    if risk_score >= 4:
        return BlindSpotSeverity.MODERATE
    return BlindSpotSeverity.MINOR


@dataclass
class Route:
    """A route as supplied by the route aggregate."""

    route_id: str
    name: str = ""
    terrain: str = "flat"
    points: list[RoutePoint] = field(default_factory=list)

    @property
    def total_distance_km(self) -> float:
        return self.points[-1].distance_from_start_km if self.points else 0.0


def _check_range(name: str, value: float, lo: float, hi: float) -> None:
    if not (isinstance(value, (int, float)) and math.isfinite(value) and lo <= value <= hi):
        raise PersistenceError(f"{name} must be a finite number in [{lo}, {hi}], got {value!r}")


@dataclass
class SharpTurn:
    """A persisted sharp-turn hazard."""

    route_id: str
    latitude: float
    longitude: float
    distance_from_start_km: float
    turn_angle: float
    turn_direction: TurnDirection
    turn_radius: float
    recommended_speed: float
    risk_score: float
    turn_severity: TurnSeverity
    confidence: float
    visibility: Visibility = Visibility.GOOD
    road_surface: RoadSurface = RoadSurface.GOOD
    guardrails: bool = False
    warning_signs: bool = False
    lighting: bool = False
    banking_angle: float = 0.0
    analysis_method: AnalysisMethod = AnalysisMethod.GPS_GEOMETRY
    id: int | None = None
    run_id: str = ""
    created_at: str = ""

    @classmethod
    def from_analysis(
        cls,
        route_id: str,
        candidate: TurnCandidate,
        risk: TurnRisk,
    ) -> SharpTurn:
        """Build a record from a scored turn candidate."""
        center = candidate.center
        return cls(
            route_id=route_id,
            latitude=center.latitude,
            longitude=center.longitude,
            distance_from_start_km=center.distance_from_start_km,
            turn_angle=candidate.angle,
            turn_direction=candidate.direction,
            turn_radius=candidate.radius_m,
            recommended_speed=risk.recommended_speed,
            risk_score=risk.risk_score,
            turn_severity=risk.severity,
            confidence=candidate.confidence,
            visibility=risk.visibility,
            road_surface=risk.road_surface,
            guardrails=risk.guardrails,
            warning_signs=risk.warning_signs,
            lighting=risk.lighting,
            banking_angle=candidate.banking_angle,
        )

    @classmethod
    def from_row(cls, row: dict) -> SharpTurn:
        """Create a :class:`SharpTurn` from a ``sharp_turns`` row dict."""
        return cls(
            id=row["id"],
            route_id=row["route_id"],
            latitude=row["latitude"],
            longitude=row["longitude"],
            distance_from_start_km=row["distance_from_start_km"],
            turn_angle=row["turn_angle"],
            turn_direction=TurnDirection(row["turn_direction"]),
            turn_radius=row["turn_radius"],
            recommended_speed=row["recommended_speed"],
            risk_score=row["risk_score"],
            turn_severity=TurnSeverity(row["turn_severity"]),
            confidence=row["confidence"],
            visibility=Visibility(row["visibility"]),
            road_surface=RoadSurface(row["road_surface"]),
            guardrails=bool(row["guardrails"]),
            warning_signs=bool(row["warning_signs"]),
            lighting=bool(row["lighting"]),
            banking_angle=row["banking_angle"],
            analysis_method=AnalysisMethod(row["analysis_method"]),
            run_id=row["run_id"],
            created_at=row["created_at"],
        )

    def validate(self) -> None:
        """Raise :class:`PersistenceError` if any field violates its range."""
        _check_range("latitude", self.latitude, -90, 90)
        _check_range("longitude", self.longitude, -180, 180)
        _check_range("turn_angle", self.turn_angle, 0, 180)
        _check_range("risk_score", self.risk_score, 1, 10)
        _check_range("recommended_speed", self.recommended_speed, 15, 80)
        _check_range("confidence", self.confidence, 0, 1)
        _check_range("turn_radius", self.turn_radius, 0, math.inf)
        if not isinstance(self.analysis_method, AnalysisMethod):
            raise PersistenceError(f"Unknown analysis method: {self.analysis_method!r}")

    @property
    def risk_category(self) -> str:
        return risk_category(self.risk_score)

    @property
    def street_view_link(self) -> str:
        return f"https://www.google.com/maps/@{self.latitude},{self.longitude},3a,75y,0h,90t"

    @property
    def maps_link(self) -> str:
        return (
            f"https://www.google.com/maps/place/{self.latitude},{self.longitude}"
            f"/@{self.latitude},{self.longitude},17z"
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "route_id": self.route_id,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "distance_from_start_km": self.distance_from_start_km,
            "turn_angle": self.turn_angle,
            "turn_direction": self.turn_direction.value,
            "turn_radius": self.turn_radius,
            "recommended_speed": self.recommended_speed,
            "risk_score": self.risk_score,
            "turn_severity": self.turn_severity.value,
            "risk_category": self.risk_category,
            "confidence": self.confidence,
            "visibility": self.visibility.value,
            "road_surface": self.road_surface.value,
            "guardrails": self.guardrails,
            "warning_signs": self.warning_signs,
            "lighting": self.lighting,
            "banking_angle": self.banking_angle,
            "analysis_method": self.analysis_method.value,
            "street_view_link": self.street_view_link,
            "maps_link": self.maps_link,
            "created_at": self.created_at,
        }


@dataclass
class BlindSpot:
    """A persisted blind-spot hazard (produced by the sight-distance calculator)."""

    route_id: str
    latitude: float
    longitude: float
    spot_type: SpotType
    visibility_distance: float
    """Available sight distance in metres."""

    risk_score: float
    distance_from_start_km: float = 0.0
    severity_level: BlindSpotSeverity | None = None
    analysis_method: AnalysisMethod = AnalysisMethod.SIGHT_DISTANCE
    id: int | None = None
    created_at: str = ""

    def __post_init__(self) -> None:
        if self.severity_level is None:
            self.severity_level = blind_spot_severity(self.risk_score)

    @classmethod
    def from_row(cls, row: dict) -> BlindSpot:
        return cls(
            id=row["id"],
            route_id=row["route_id"],
            latitude=row["latitude"],
            longitude=row["longitude"],
            distance_from_start_km=row["distance_from_start_km"],
            spot_type=SpotType(row["spot_type"]),
            visibility_distance=row["visibility_distance"],
            risk_score=row["risk_score"],
            severity_level=BlindSpotSeverity(row["severity_level"]),
            analysis_method=AnalysisMethod(row["analysis_method"]),
            created_at=row["created_at"],
        )

    @classmethod
    def from_dict(cls, data: dict) -> BlindSpot:
        """Lenient constructor for analyzer output; optional fields may be absent."""
        severity = data.get("severity_level")
        return cls(
            route_id=str(data.get("route_id", "")),
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            spot_type=SpotType(data["spot_type"]),
            visibility_distance=float(data["visibility_distance"]),
            risk_score=float(data["risk_score"]),
            distance_from_start_km=float(data.get("distance_from_start_km", 0.0)),
            severity_level=BlindSpotSeverity(severity) if severity else None,
        )

    def validate(self) -> None:
        _check_range("latitude", self.latitude, -90, 90)
        _check_range("longitude", self.longitude, -180, 180)
        _check_range("risk_score", self.risk_score, 1, 10)
        _check_range("visibility_distance", self.visibility_distance, 0, math.inf)

    @property
    def risk_category(self) -> str:
        return risk_category(self.risk_score)

    @property
    def visibility_category(self) -> str:
        if self.visibility_distance < 50:
            return "very_poor"
        if self.visibility_distance < 100:
            return "poor"
        if self.visibility_distance < 200:
            return "limited"
        return "adequate"

    @property
    def satellite_view_link(self) -> str:
        return f"https://www.google.com/maps/@{self.latitude},{self.longitude},200m/data=!3m1!1e3"

    def safety_recommendations(self) -> list[str]:
        """Driver advice for this spot, by risk, type and sight distance."""
        advice: list[str] = []

        if self.risk_score >= 8:
            advice += [
                "CRITICAL: Reduce speed to 20-30 km/h when approaching this area",
                "Use horn/signal to alert other vehicles of your presence",
                "Consider alternative route if possible",
            ]
        elif self.risk_score >= 6:
            advice += [
                "HIGH RISK: Reduce speed significantly and exercise extreme caution",
                "Maintain extra following distance",
            ]

        advice += _SPOT_TYPE_ADVICE.get(self.spot_type, [])

        if self.visibility_distance < 50:
            advice += [
                "VERY LIMITED VISIBILITY: Use hazard lights",
                "Travel in convoy with lead vehicle communication",
            ]
        elif self.visibility_distance < 100:
            advice.append("LIMITED VISIBILITY: Reduce speed and increase alertness")

        return advice

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "route_id": self.route_id,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "distance_from_start_km": self.distance_from_start_km,
            "spot_type": self.spot_type.value,
            "visibility_distance": self.visibility_distance,
            "visibility_category": self.visibility_category,
            "risk_score": self.risk_score,
            "risk_category": self.risk_category,
            "severity_level": self.severity_level.value if self.severity_level else None,
            "analysis_method": self.analysis_method.value,
            "satellite_view_link": self.satellite_view_link,
            "created_at": self.created_at,
        }


_SPOT_TYPE_ADVICE: dict[SpotType, list[str]] = {
    SpotType.CREST: [
        "Reduce speed before cresting hill",
        "Stay in center of lane and be prepared to stop",
        "Use headlights during daylight hours",
    ],
    SpotType.CURVE: [
        "Reduce speed before entering curve",
        "Position vehicle for maximum sight distance",
        "Never attempt overtaking in curved sections",
    ],
    SpotType.OBSTRUCTION: [
        "Proceed with extreme caution",
        "Watch for pedestrians and cross traffic",
        "Use convoy travel if possible",
    ],
    SpotType.INTERSECTION: [
        "Come to complete stop and check all directions",
        "Use horn to signal approach",
    ],
}
