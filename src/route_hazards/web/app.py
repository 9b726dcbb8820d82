"""FastAPI Web application — route visibility analysis and hazard queries."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException

from route_hazards.analysis.service import RouteAnalysisService
from route_hazards.config import default_db_path
from route_hazards.errors import InsufficientGpsPoints, RouteNotFound
from route_hazards.storage.storage import HazardStorage
from route_hazards.web.schemas import (
    AnalyzeResponse,
    BlindSpotRecord,
    BlindSpotsResponse,
    BlindSpotStats,
    CombinedStats,
    DeleteResponse,
    HealthResponse,
    SharpTurnRecord,
    SharpTurnsResponse,
    SharpTurnStats,
    VisibilityStatsResponse,
)

load_dotenv()  # loads .env from project root; must run before env vars are consumed

_logger = logging.getLogger(__name__)

VERSION = "0.1.0"

app = FastAPI(title="Route Visibility Hazards", version=VERSION)


def _storage(db_path: str | None = None) -> HazardStorage:
    return HazardStorage(db_path or default_db_path())


def _density(count: int, distance_km: float) -> float:
    return round(count / distance_km, 2) if distance_km > 0 else 0.0


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", version=VERSION)


@app.post("/api/routes/{route_id}/analyze", response_model=AnalyzeResponse)
def analyze(route_id: str, db: str | None = None) -> AnalyzeResponse:
    """Run the full sharp-turn / blind-spot analysis and replace stored turns."""
    svc = RouteAnalysisService(db or default_db_path())
    try:
        result = svc.analyze_route(route_id)
    except RouteNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except InsufficientGpsPoints as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except Exception as exc:
        _logger.exception("Analysis of route %s failed", route_id)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    data = result.to_dict()
    return AnalyzeResponse(
        route_id=data["route_id"],
        route_name=data["route_name"],
        analysis_date=data["analysis_date"],
        summary=data["summary"],
        sharp_turns=data["sharp_turns"]["turns"],
        blind_spots=data["blind_spots"]["spots"],
        recommendations=data["recommendations"],
        errors={
            "sharp_turns": data["sharp_turns"]["error"],
            "blind_spots": data["blind_spots"]["error"],
        },
    )


@app.get("/api/routes/{route_id}/sharp-turns", response_model=SharpTurnsResponse)
def list_sharp_turns(
    route_id: str,
    risk_level: str = "all",
    sort: str = "distance",
    db: str | None = None,
) -> SharpTurnsResponse:
    """Return stored sharp turns, filtered by risk band and sorted."""
    storage = _storage(db)
    try:
        if storage.get_route(route_id) is None:
            raise HTTPException(status_code=404, detail="Route not found")
        try:
            turns = storage.list_sharp_turns(route_id, risk_level=risk_level, sort=sort)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
    finally:
        storage.close()

    return SharpTurnsResponse(
        route_id=route_id,
        risk_level=risk_level,
        sort=sort,
        sharp_turns=[SharpTurnRecord(**t.to_dict()) for t in turns],
    )


@app.get("/api/routes/{route_id}/blind-spots", response_model=BlindSpotsResponse)
def list_blind_spots(
    route_id: str,
    risk_level: str = "all",
    sort: str = "distance",
    db: str | None = None,
) -> BlindSpotsResponse:
    """Return stored blind spots, filtered by risk band and sorted."""
    storage = _storage(db)
    try:
        if storage.get_route(route_id) is None:
            raise HTTPException(status_code=404, detail="Route not found")
        try:
            spots = storage.list_blind_spots(route_id, risk_level=risk_level, sort=sort)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
    finally:
        storage.close()

    return BlindSpotsResponse(
        route_id=route_id,
        risk_level=risk_level,
        sort=sort,
        blind_spots=[BlindSpotRecord(**s.to_dict()) for s in spots],
    )


@app.get("/api/routes/{route_id}/visibility-stats", response_model=VisibilityStatsResponse)
def visibility_stats(route_id: str, db: str | None = None) -> VisibilityStatsResponse:
    """Aggregate statistics over the stored hazards of a route."""
    storage = _storage(db)
    try:
        route = storage.get_route(route_id)
        if route is None:
            raise HTTPException(status_code=404, detail="Route not found")
        turn_stats = storage.sharp_turn_stats(route_id)
        spot_stats = storage.blind_spot_stats(route_id)
    finally:
        storage.close()

    distance = route.total_distance_km
    total_points = turn_stats["total"] + spot_stats["total"]
    return VisibilityStatsResponse(
        route_id=route_id,
        total_distance_km=distance,
        sharp_turns=SharpTurnStats(
            **turn_stats, density_per_km=_density(turn_stats["total"], distance)
        ),
        blind_spots=BlindSpotStats(
            **spot_stats, density_per_km=_density(spot_stats["total"], distance)
        ),
        combined=CombinedStats(
            total_risk_points=total_points,
            critical_points=turn_stats["critical"] + spot_stats["critical"],
            overall_risk_density=_density(total_points, distance),
        ),
    )


@app.delete("/api/routes/{route_id}/visibility-data", response_model=DeleteResponse)
def delete_visibility_data(route_id: str, db: str | None = None) -> DeleteResponse:
    """Delete every stored sharp turn and blind spot of a route."""
    storage = _storage(db)
    try:
        if storage.get_route(route_id) is None:
            raise HTTPException(status_code=404, detail="Route not found")
        turns, spots = storage.delete_visibility_data(route_id)
    finally:
        storage.close()

    _logger.info("Deleted visibility data for route %s: %d turns, %d spots", route_id, turns, spots)
    return DeleteResponse(route_id=route_id, deleted_sharp_turns=turns, deleted_blind_spots=spots)
