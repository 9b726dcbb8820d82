"""Geometry primitives shared by the turn analyzer and route construction."""

from __future__ import annotations

import math
from collections.abc import Sequence

from route_hazards.geometry.models import RoutePoint, Vector2D

EARTH_RADIUS_KM = 6371.0

MIN_RADIUS_M = 30.0
MAX_RADIUS_M = 5000.0
STRAIGHT_RADIUS_M = 10_000.0

# Superelevation estimate (AASHTO): e = V^2 / (127 R), capped at e_max.
_DESIGN_SPEED_KPH = 60.0
_MAX_SUPERELEVATION = 0.08


def haversine_m(a: RoutePoint, b: RoutePoint) -> float:
    """Great-circle distance between *a* and *b* in metres (unrounded)."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = lat2 - lat1
    d_lon = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c * 1000.0


def distance_km(a: RoutePoint, b: RoutePoint) -> float:
    """Haversine distance in kilometres, rounded to 2 decimals."""
    return round(haversine_m(a, b) / 1000.0, 2)


def vector_angle_degrees(v1: Vector2D, v2: Vector2D) -> float:
    """Angle between two planar vectors in degrees [0, 180].

    Returns 0.0 if either vector has zero magnitude.  The cosine is clamped
    to [-1, 1] so floating-point drift never produces a domain error.
    """
    mag1 = v1.magnitude
    mag2 = v2.magnitude
    if mag1 == 0 or mag2 == 0:
        return 0.0

    cos_angle = (v1.dx * v2.dx + v1.dy * v2.dy) / (mag1 * mag2)
    cos_angle = max(-1.0, min(1.0, cos_angle))
    return math.degrees(math.acos(cos_angle))


def unit_cross_product(v1: Vector2D, v2: Vector2D) -> float:
    """z-component of the cross product of the normalised vectors (= sin θ).

    Positive means a counter-clockwise (left) change of heading.
    """
    mag1 = v1.magnitude
    mag2 = v2.magnitude
    if mag1 == 0 or mag2 == 0:
        return 0.0
    return (v1.dx * v2.dy - v1.dy * v2.dx) / (mag1 * mag2)


def radius_from_chord_and_angle(chord_km: float, angle_deg: float) -> float:
    """Estimate the radius (m) of an arc from its chord and central angle.

    ``r = chord / (2 sin(θ/2))``, clamped to [30, 5000] m.  An angle of 0 or
    >= 180 degrees is treated as a straight road (10 000 m).
    """
    if angle_deg == 0 or angle_deg >= 180:
        return STRAIGHT_RADIUS_M

    chord_m = chord_km * 1000.0
    radius = chord_m / (2 * math.sin(math.radians(angle_deg) / 2))
    return max(MIN_RADIUS_M, min(MAX_RADIUS_M, radius))


def estimate_banking_angle(radius_m: float) -> float:
    """Expected road banking (degrees) for a curve of *radius_m* metres."""
    if radius_m <= 0:
        return 0.0
    e = min(_MAX_SUPERELEVATION, _DESIGN_SPEED_KPH**2 / (127.0 * radius_m))
    return round(math.degrees(math.atan(e)), 1)


def with_cumulative_distances(
    coordinates: Sequence[tuple[float, float]],
) -> list[RoutePoint]:
    """Build ordered :class:`RoutePoint` objects from ``(lat, lon)`` pairs.

    Each point carries its cumulative distance from the start and the
    remaining distance to the end of the route.
    """
    points: list[RoutePoint] = []
    travelled = 0.0
    prev: RoutePoint | None = None
    for order, (lat, lon) in enumerate(coordinates):
        pt = RoutePoint(latitude=lat, longitude=lon, order=order)
        if prev is not None:
            travelled += haversine_m(prev, pt) / 1000.0
        points.append(
            RoutePoint(
                latitude=lat,
                longitude=lon,
                order=order,
                distance_from_start_km=round(travelled, 2),
            )
        )
        prev = pt

    total = round(travelled, 2)
    return [
        RoutePoint(
            latitude=p.latitude,
            longitude=p.longitude,
            order=p.order,
            distance_from_start_km=p.distance_from_start_km,
            distance_to_end_km=round(total - p.distance_from_start_km, 2),
        )
        for p in points
    ]
