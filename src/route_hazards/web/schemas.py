"""Pydantic response schemas for the Web API."""

from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    version: str


class SharpTurnRecord(BaseModel):
    id: int | None
    latitude: float
    longitude: float
    distance_from_start_km: float
    turn_angle: float
    turn_direction: str
    turn_radius: float
    recommended_speed: float
    risk_score: float
    turn_severity: str
    risk_category: str
    confidence: float
    visibility: str
    road_surface: str
    guardrails: bool
    warning_signs: bool
    lighting: bool
    banking_angle: float
    analysis_method: str
    street_view_link: str
    maps_link: str
    created_at: str


class BlindSpotRecord(BaseModel):
    id: int | None
    latitude: float
    longitude: float
    distance_from_start_km: float
    spot_type: str
    visibility_distance: float
    visibility_category: str
    risk_score: float
    risk_category: str
    severity_level: str | None
    analysis_method: str
    satellite_view_link: str
    created_at: str


class RecommendationRecord(BaseModel):
    priority: str
    category: str
    title: str
    description: str
    actions: list[str]


class AnalysisSummaryRecord(BaseModel):
    total_sharp_turns: int
    critical_turns: int
    total_blind_spots: int
    critical_blind_spots: int
    avg_turn_risk: float
    avg_blind_spot_risk: float
    overall_risk_level: str
    analysis_success: bool


class AnalyzeResponse(BaseModel):
    route_id: str
    route_name: str
    analysis_date: str
    summary: AnalysisSummaryRecord
    sharp_turns: list[SharpTurnRecord]
    blind_spots: list[BlindSpotRecord]
    recommendations: list[RecommendationRecord]
    errors: dict[str, str | None]


class HazardStats(BaseModel):
    total: int
    average_risk_score: float
    max_risk_score: float
    critical: int
    high: int
    density_per_km: float


class SharpTurnStats(HazardStats):
    severity_breakdown: dict[str, int]


class BlindSpotStats(HazardStats):
    type_breakdown: dict[str, int]
    average_visibility_distance: float
    poor_visibility_spots: int


class SharpTurnsResponse(BaseModel):
    route_id: str
    risk_level: str
    sort: str
    sharp_turns: list[SharpTurnRecord]


class BlindSpotsResponse(BaseModel):
    route_id: str
    risk_level: str
    sort: str
    blind_spots: list[BlindSpotRecord]


class CombinedStats(BaseModel):
    total_risk_points: int
    critical_points: int
    overall_risk_density: float


class VisibilityStatsResponse(BaseModel):
    route_id: str
    total_distance_km: float
    sharp_turns: SharpTurnStats
    blind_spots: BlindSpotStats
    combined: CombinedStats


class DeleteResponse(BaseModel):
    route_id: str
    deleted_sharp_turns: int
    deleted_blind_spots: int
