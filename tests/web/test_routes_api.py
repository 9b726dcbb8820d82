"""Route analysis and hazard query endpoints."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from route_hazards.errors import InsufficientGpsPoints, RouteNotFound


def _patch_service(side_effect):
    mock_svc = MagicMock()
    mock_svc.analyze_route.side_effect = side_effect
    return patch("route_hazards.web.app.RouteAnalysisService", return_value=mock_svc)


# ---------------------------------------------------------------------------
# POST /api/routes/{route_id}/analyze
# ---------------------------------------------------------------------------


class TestAnalyze:
    def test_analyze_success(self, client, route_db):
        resp = client.post("/api/routes/R1/analyze", params={"db": route_db})
        assert resp.status_code == 200
        data = resp.json()
        assert data["route_id"] == "R1"
        assert data["summary"]["total_sharp_turns"] == 3
        assert data["summary"]["total_blind_spots"] == 2
        assert data["summary"]["analysis_success"] is True
        assert data["errors"] == {"sharp_turns": None, "blind_spots": None}
        assert data["recommendations"][0]["priority"] == "CRITICAL"
        assert data["recommendations"][-1]["priority"] == "STANDARD"

    def test_analyze_turn_records(self, client, route_db):
        data = client.post("/api/routes/R1/analyze", params={"db": route_db}).json()
        turn = max(data["sharp_turns"], key=lambda t: t["turn_angle"])
        assert turn["turn_direction"] == "left"
        assert turn["analysis_method"] == "gps_geometry"
        assert turn["maps_link"].startswith("https://www.google.com/maps/place/")
        assert turn["id"] is not None

    def test_route_not_found_returns_404(self, client):
        with _patch_service(RouteNotFound("ghost")):
            resp = client.post("/api/routes/ghost/analyze")
        assert resp.status_code == 404

    def test_insufficient_points_returns_422(self, client):
        with _patch_service(InsufficientGpsPoints("R1", 3, 5)):
            resp = client.post("/api/routes/R1/analyze")
        assert resp.status_code == 422
        assert "3 found" in resp.json()["detail"]

    def test_unexpected_error_returns_500(self, client):
        with _patch_service(RuntimeError("db locked")):
            resp = client.post("/api/routes/R1/analyze")
        assert resp.status_code == 500


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


@pytest.fixture
def analyzed_db(client, route_db):
    client.post("/api/routes/R1/analyze", params={"db": route_db})
    return route_db


class TestSharpTurns:
    def test_default_sorted_by_distance(self, client, analyzed_db):
        resp = client.get("/api/routes/R1/sharp-turns", params={"db": analyzed_db})
        assert resp.status_code == 200
        dists = [t["distance_from_start_km"] for t in resp.json()["sharp_turns"]]
        assert dists == sorted(dists)
        assert len(dists) == 3

    def test_sort_by_risk_and_filter(self, client, analyzed_db):
        resp = client.get(
            "/api/routes/R1/sharp-turns",
            params={"db": analyzed_db, "sort": "risk", "risk_level": "critical"},
        )
        turns = resp.json()["sharp_turns"]
        assert [t["turn_angle"] for t in turns] == [90.0]
        assert turns[0]["risk_category"] == "critical"

    def test_bad_filter_returns_422(self, client, analyzed_db):
        resp = client.get(
            "/api/routes/R1/sharp-turns", params={"db": analyzed_db, "risk_level": "extreme"}
        )
        assert resp.status_code == 422

    def test_unknown_route_returns_404(self, client, analyzed_db):
        resp = client.get("/api/routes/ghost/sharp-turns", params={"db": analyzed_db})
        assert resp.status_code == 404


class TestBlindSpots:
    def test_list_sorted_by_risk(self, client, route_db):
        resp = client.get("/api/routes/R1/blind-spots", params={"db": route_db, "sort": "risk"})
        assert resp.status_code == 200
        spots = resp.json()["blind_spots"]
        assert [s["risk_score"] for s in spots] == [9.0, 5.0]
        assert spots[0]["visibility_category"] == "very_poor"
        assert spots[0]["satellite_view_link"].endswith("/data=!3m1!1e3")

    def test_bad_sort_returns_422(self, client, route_db):
        resp = client.get("/api/routes/R1/blind-spots", params={"db": route_db, "sort": "type"})
        assert resp.status_code == 422


class TestVisibilityStats:
    def test_stats(self, client, analyzed_db):
        resp = client.get("/api/routes/R1/visibility-stats", params={"db": analyzed_db})
        assert resp.status_code == 200
        data = resp.json()
        assert data["sharp_turns"]["total"] == 3
        assert data["blind_spots"]["total"] == 2
        assert data["blind_spots"]["poor_visibility_spots"] == 1
        assert data["combined"]["total_risk_points"] == 5
        assert data["combined"]["critical_points"] == 2
        assert data["total_distance_km"] > 0
        assert data["sharp_turns"]["density_per_km"] > 0

    def test_unknown_route_returns_404(self, client, analyzed_db):
        resp = client.get("/api/routes/ghost/visibility-stats", params={"db": analyzed_db})
        assert resp.status_code == 404


class TestDeleteVisibilityData:
    def test_delete(self, client, analyzed_db):
        resp = client.delete("/api/routes/R1/visibility-data", params={"db": analyzed_db})
        assert resp.status_code == 200
        assert resp.json() == {"route_id": "R1", "deleted_sharp_turns": 3, "deleted_blind_spots": 2}

        stats = client.get("/api/routes/R1/visibility-stats", params={"db": analyzed_db}).json()
        assert stats["combined"]["total_risk_points"] == 0

    def test_unknown_route_returns_404(self, client, analyzed_db):
        resp = client.delete("/api/routes/ghost/visibility-data", params={"db": analyzed_db})
        assert resp.status_code == 404
