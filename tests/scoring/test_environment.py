"""Tests for environmental context estimators."""

from __future__ import annotations

from route_hazards.geometry.models import RoutePoint
from route_hazards.scoring.environment import (
    MAJOR_CITIES,
    RURAL_RISK,
    CityArea,
    FixedEnvironmentEstimator,
    SeededEnvironmentEstimator,
    UrbanProximityEstimator,
    is_urban,
)
from route_hazards.scoring.models import EnvironmentalContext, Visibility

_DELHI = RoutePoint(28.65, 77.25)
_LADAKH = RoutePoint(34.16, 77.58)


class TestIsUrban:
    def test_inside_city_radius(self):
        assert is_urban(_DELHI)

    def test_remote_point(self):
        assert not is_urban(_LADAKH)

    def test_custom_city_table(self):
        cities = (CityArea("Leh", 34.16, 77.58, 0.1),)
        assert is_urban(_LADAKH, cities)
        assert not is_urban(_DELHI, cities)

    def test_default_table_has_five_cities(self):
        assert [c.name for c in MAJOR_CITIES] == [
            "Delhi", "Mumbai", "Bangalore", "Kolkata", "Hyderabad",
        ]


class TestUrbanProximityEstimator:
    def test_urban_context(self):
        ctx = UrbanProximityEstimator().estimate(_DELHI)
        assert ctx.lighting
        assert ctx.warning_signs
        assert ctx.additional_risk == 0.0

    def test_rural_context_adds_risk(self):
        ctx = UrbanProximityEstimator().estimate(_LADAKH)
        assert not ctx.lighting
        assert not ctx.guardrails
        assert ctx.additional_risk == RURAL_RISK

    def test_deterministic(self):
        est = UrbanProximityEstimator()
        assert est.estimate(_LADAKH) == est.estimate(_LADAKH)


class TestSeededEnvironmentEstimator:
    def test_same_seed_same_context(self):
        a = SeededEnvironmentEstimator(seed=42)
        b = SeededEnvironmentEstimator(seed=42)
        for lat in (34.0, 34.1, 34.2, 34.3):
            pt = RoutePoint(lat, 77.5)
            assert a.estimate(pt) == b.estimate(pt)

    def test_independent_of_call_order(self):
        est = SeededEnvironmentEstimator(seed=7)
        pts = [RoutePoint(34.0 + i * 0.01, 77.5) for i in range(10)]
        forward = [est.estimate(p) for p in pts]
        backward = [est.estimate(p) for p in reversed(pts)][::-1]
        assert forward == backward

    def test_rural_always_carries_risk(self):
        est = SeededEnvironmentEstimator(seed=1)
        for i in range(20):
            ctx = est.estimate(RoutePoint(34.0 + i * 0.01, 77.5))
            assert ctx.additional_risk == RURAL_RISK
            assert ctx.visibility in (Visibility.GOOD, Visibility.LIMITED)

    def test_urban_never_adds_risk(self):
        est = SeededEnvironmentEstimator(seed=1)
        for i in range(20):
            ctx = est.estimate(RoutePoint(28.6 + i * 0.005, 77.2))
            assert ctx.additional_risk == 0.0

    def test_different_seeds_can_differ(self):
        pts = [RoutePoint(34.0 + i * 0.01, 77.5) for i in range(30)]
        a = [SeededEnvironmentEstimator(seed=1).estimate(p) for p in pts]
        b = [SeededEnvironmentEstimator(seed=2).estimate(p) for p in pts]
        assert a != b


class TestFixedEnvironmentEstimator:
    def test_default_is_neutral(self):
        ctx = FixedEnvironmentEstimator().estimate(_LADAKH)
        assert ctx == EnvironmentalContext()

    def test_returns_given_context(self):
        given = EnvironmentalContext(visibility=Visibility.POOR, additional_risk=2.0)
        est = FixedEnvironmentEstimator(given)
        assert est.estimate(_DELHI) is given
