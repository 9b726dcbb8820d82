"""Route geometry data structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TurnDirection(str, Enum):
    """Direction of travel change at a turn."""

    LEFT = "left"
    RIGHT = "right"
    HAIRPIN = "hairpin"
    STRAIGHT = "straight"


@dataclass(frozen=True)
class RoutePoint:
    """A single GPS sample on a route.

    Points are immutable once a route is created; the order of a route's
    point list is the order of travel.
    """

    latitude: float
    """Latitude in decimal degrees [-90, 90]."""

    longitude: float
    """Longitude in decimal degrees [-180, 180]."""

    order: int = 0
    """Zero-based position of the point along the route."""

    distance_from_start_km: float = 0.0
    """Cumulative distance travelled from the first point (km)."""

    distance_to_end_km: float = 0.0
    """Remaining distance to the last point (km)."""


@dataclass(frozen=True)
class Vector2D:
    """A planar vector in (Δlongitude, Δlatitude) degree space."""

    dx: float
    dy: float

    @property
    def magnitude(self) -> float:
        return (self.dx * self.dx + self.dy * self.dy) ** 0.5

    def is_degenerate(self) -> bool:
        return self.dx == 0 and self.dy == 0


@dataclass
class TurnCandidate:
    """A detected direction change within a 5-point analysis window.

    Transient: produced by :class:`~route_hazards.geometry.analyzer.TurnGeometryAnalyzer`
    and consumed by the risk scorer within a single scan iteration.
    """

    center: RoutePoint
    """The window midpoint, where the turn is recorded."""

    preceding: tuple[RoutePoint, ...]
    following: tuple[RoutePoint, ...]

    incoming: Vector2D
    """Vector from window start to the midpoint."""

    outgoing: Vector2D
    """Vector from the midpoint to window end."""

    angle: float
    """Change of heading in degrees [0, 180], rounded to 0.1."""

    direction: TurnDirection

    cross_product: float
    """z-component of ``unit(incoming) × unit(outgoing)``; sign gives the direction."""

    chord_km: float
    """Straight-line distance between the first and last window point."""

    radius_m: float
    """Estimated turn radius in metres (>= 30)."""

    banking_angle: float
    """Estimated road superelevation in degrees."""

    confidence: float
    """Reliability of the geometry estimate [0.5, 1.0]."""

    @property
    def points(self) -> tuple[RoutePoint, ...]:
        return (*self.preceding, self.center, *self.following)
