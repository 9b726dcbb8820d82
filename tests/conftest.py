"""Shared route builders and storage fixtures."""

from __future__ import annotations

import math

import pytest

from route_hazards.geometry.models import RoutePoint
from route_hazards.geometry.primitives import with_cumulative_distances
from route_hazards.storage.models import BlindSpot, Route, SpotType
from route_hazards.storage.storage import HazardStorage

# Near the equator and far from every city in MAJOR_CITIES, so planar degree
# space is close to metric and the urban estimator always answers "rural".
ORIGIN = (1.0, 100.0)
KM_PER_DEG = 111.195


def polyline(
    headings: list[float],
    step_km: float = 0.05,
    origin: tuple[float, float] = ORIGIN,
) -> list[tuple[float, float]]:
    """Walk from *origin*, one step per heading (degrees CCW from east)."""
    step = step_km / KM_PER_DEG
    lat, lon = origin
    coords = [(lat, lon)]
    for h in headings:
        rad = math.radians(h)
        lon += step * math.cos(rad)
        lat += step * math.sin(rad)
        coords.append((lat, lon))
    return coords


def corner(angle: float, chord_km: float, leg: int = 4) -> list[tuple[float, float]]:
    """Two straight legs of *leg* steps meeting at a heading change of *angle*.

    The step is sized so the 5-point window centred on the corner spans
    *chord_km* end to end.
    """
    interior = math.radians(180.0 - angle)
    step_km = chord_km / (2 * 2 * math.sin(interior / 2))
    return polyline([0.0] * leg + [angle] * leg, step_km=step_km)


def make_route(
    coords: list[tuple[float, float]],
    route_id: str = "R1",
    terrain: str = "flat",
    name: str = "Test Route",
) -> Route:
    return Route(
        route_id=route_id,
        name=name,
        terrain=terrain,
        points=with_cumulative_distances(coords),
    )


def window(coords: list[tuple[float, float]], center: int) -> list[RoutePoint]:
    """The 5-point analysis window centred on index *center*."""
    return with_cumulative_distances(coords)[center - 2:center + 3]


def make_blind_spot(**overrides) -> BlindSpot:
    defaults = dict(
        route_id="R1",
        latitude=1.0,
        longitude=100.001,
        spot_type=SpotType.CREST,
        visibility_distance=80.0,
        risk_score=7.0,
        distance_from_start_km=0.1,
    )
    defaults.update(overrides)
    return BlindSpot(**defaults)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "test_hazards.db")


@pytest.fixture
def storage(db_path):
    s = HazardStorage(db_path)
    yield s
    s.close()
