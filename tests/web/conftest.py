"""Shared fixtures for web tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from route_hazards.storage.storage import HazardStorage
from route_hazards.web.app import app
from tests.conftest import corner, make_blind_spot, make_route


@pytest.fixture
def client():
    """FastAPI test client."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def route_db(db_path):
    """Database holding route R1 (a 90° corner) and two blind spots."""
    storage = HazardStorage(db_path)
    try:
        storage.save_route(make_route(corner(90, chord_km=0.2)))
        storage.save_blind_spots(
            "R1",
            [
                make_blind_spot(risk_score=9.0, visibility_distance=40.0),
                make_blind_spot(risk_score=5.0, distance_from_start_km=0.3, visibility_distance=150.0),
            ],
        )
    finally:
        storage.close()
    return db_path
