"""Tests for geometry primitives: distance, vector angle, radius, banking."""

from __future__ import annotations

import math

import pytest

from route_hazards.geometry.models import RoutePoint, Vector2D
from route_hazards.geometry.primitives import (
    MAX_RADIUS_M,
    MIN_RADIUS_M,
    STRAIGHT_RADIUS_M,
    distance_km,
    estimate_banking_angle,
    haversine_m,
    radius_from_chord_and_angle,
    unit_cross_product,
    vector_angle_degrees,
    with_cumulative_distances,
)


class TestDistance:
    def test_same_point_is_zero(self):
        p = RoutePoint(28.6, 77.2)
        assert distance_km(p, p) == 0.0

    def test_one_degree_latitude(self):
        a = RoutePoint(10.0, 80.0)
        b = RoutePoint(11.0, 80.0)
        assert distance_km(a, b) == pytest.approx(111.19, abs=0.01)

    def test_rounded_to_two_decimals(self):
        a = RoutePoint(0.0, 0.0)
        b = RoutePoint(0.0, 0.0012345)
        d = distance_km(a, b)
        assert d == round(d, 2)

    def test_symmetric(self):
        a = RoutePoint(34.08, 74.79)
        b = RoutePoint(34.16, 77.58)
        assert haversine_m(a, b) == pytest.approx(haversine_m(b, a))

    def test_delhi_to_mumbai(self):
        d = distance_km(RoutePoint(28.7041, 77.1025), RoutePoint(19.0760, 72.8777))
        assert 1140 < d < 1160


class TestVectorAngle:
    def test_same_direction_is_zero(self):
        assert vector_angle_degrees(Vector2D(1, 0), Vector2D(2, 0)) == pytest.approx(0.0)

    def test_right_angle(self):
        assert vector_angle_degrees(Vector2D(1, 0), Vector2D(0, 1)) == pytest.approx(90.0)

    def test_reversal_is_180(self):
        assert vector_angle_degrees(Vector2D(1, 0), Vector2D(-1, 0)) == pytest.approx(180.0)

    def test_zero_vector_returns_zero(self):
        assert vector_angle_degrees(Vector2D(0, 0), Vector2D(1, 1)) == 0.0
        assert vector_angle_degrees(Vector2D(1, 1), Vector2D(0, 0)) == 0.0

    def test_nearly_parallel_never_raises(self):
        # cos may drift above 1.0 without clamping
        v = Vector2D(0.1 + 0.2, 0.3)
        w = Vector2D(0.3, 0.1 + 0.2)
        angle = vector_angle_degrees(v, w)
        assert not math.isnan(angle)
        assert 0.0 <= angle <= 180.0

    def test_tiny_degree_space_vectors(self):
        v = Vector2D(0.0006, 0.0)
        w = Vector2D(0.0, 0.0006)
        assert vector_angle_degrees(v, w) == pytest.approx(90.0)


class TestCrossProduct:
    def test_left_turn_positive(self):
        assert unit_cross_product(Vector2D(1, 0), Vector2D(0, 1)) == pytest.approx(1.0)

    def test_right_turn_negative(self):
        assert unit_cross_product(Vector2D(1, 0), Vector2D(0, -1)) == pytest.approx(-1.0)

    def test_collinear_zero(self):
        assert unit_cross_product(Vector2D(1, 1), Vector2D(3, 3)) == pytest.approx(0.0)

    def test_scale_invariant(self):
        big = unit_cross_product(Vector2D(1, 0), Vector2D(1, 1))
        small = unit_cross_product(Vector2D(1e-4, 0), Vector2D(1e-4, 1e-4))
        assert big == pytest.approx(small)


class TestRadius:
    def test_zero_angle_is_straight(self):
        assert radius_from_chord_and_angle(0.2, 0) == STRAIGHT_RADIUS_M

    def test_full_reversal_is_straight(self):
        assert radius_from_chord_and_angle(0.2, 180) == STRAIGHT_RADIUS_M

    def test_right_angle(self):
        # 200 m / (2 sin 45°)
        assert radius_from_chord_and_angle(0.2, 90) == pytest.approx(141.42, abs=0.01)

    def test_floor(self):
        assert radius_from_chord_and_angle(0.01, 170) == MIN_RADIUS_M

    def test_ceiling(self):
        assert radius_from_chord_and_angle(5.0, 1) == MAX_RADIUS_M


class TestBanking:
    def test_tight_curve_capped(self):
        # e_max = 0.08 → atan(0.08) ≈ 4.6°
        assert estimate_banking_angle(30) == pytest.approx(4.6)

    def test_open_curve_shallower(self):
        assert estimate_banking_angle(2000) < estimate_banking_angle(300)

    def test_non_positive_radius(self):
        assert estimate_banking_angle(0) == 0.0


class TestCumulativeDistances:
    def test_orders_and_endpoints(self):
        coords = [(10.0, 80.0), (10.01, 80.0), (10.02, 80.0)]
        pts = with_cumulative_distances(coords)
        assert [p.order for p in pts] == [0, 1, 2]
        assert pts[0].distance_from_start_km == 0.0
        assert pts[-1].distance_to_end_km == 0.0
        assert pts[-1].distance_from_start_km == pytest.approx(2.22, abs=0.01)

    def test_start_plus_remaining_is_total(self):
        coords = [(10.0, 80.0 + i * 0.01) for i in range(6)]
        pts = with_cumulative_distances(coords)
        total = pts[-1].distance_from_start_km
        for p in pts:
            assert p.distance_from_start_km + p.distance_to_end_km == pytest.approx(total, abs=0.011)

    def test_empty(self):
        assert with_cumulative_distances([]) == []
