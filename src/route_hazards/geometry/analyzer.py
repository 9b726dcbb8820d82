"""Turn detection over a sliding 5-point window.

The heading change is measured on raw (Δlongitude, Δlatitude) deltas rather
than geodesic bearings.  This planar approximation is only valid for windows
spanning a few hundred metres; at larger window sizes, or where the window
covers a large latitude change, longitude degrees shrink relative to latitude
degrees and the measured angle is distorted.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator, Sequence

from route_hazards.errors import TurnGeometryError
from route_hazards.geometry.models import RoutePoint, TurnCandidate, TurnDirection, Vector2D
from route_hazards.geometry.primitives import (
    MIN_RADIUS_M,
    distance_km,
    estimate_banking_angle,
    haversine_m,
    radius_from_chord_and_angle,
    unit_cross_product,
    vector_angle_degrees,
)

_logger = logging.getLogger(__name__)

WINDOW_SIZE = 5
HALF_WINDOW = WINDOW_SIZE // 2
STRAIGHT_EPSILON = 1e-4


def turn_direction(cross: float, epsilon: float = STRAIGHT_EPSILON) -> TurnDirection:
    """Classify a unit cross product: negative → right, positive → left."""
    if abs(cross) < epsilon:
        return TurnDirection.STRAIGHT
    return TurnDirection.LEFT if cross > 0 else TurnDirection.RIGHT


def turn_confidence(points: Sequence[RoutePoint], angle: float) -> float:
    """Estimate how reliable a window's geometry is, in [0.5, 1.0].

    Dense windows, clean angles (not noise, not a reversal) and evenly spaced
    samples each raise confidence by 0.1 over a base of 0.7.
    """
    confidence = 0.7

    if len(points) >= WINDOW_SIZE:
        confidence += 0.1

    if 15 <= angle <= 165:
        confidence += 0.1

    spacings = [haversine_m(points[i - 1], points[i]) for i in range(1, len(points))]
    if spacings:
        mean = sum(spacings) / len(spacings)
        if all(abs(d - mean) < mean * 0.5 for d in spacings):
            confidence += 0.1

    return max(0.5, min(1.0, confidence))


class TurnGeometryAnalyzer:
    """Detect direction changes along an ordered route.

    Args:
        straight_epsilon: ``|cross|`` below this value classifies a window as
            straight.
    """

    def __init__(self, straight_epsilon: float = STRAIGHT_EPSILON) -> None:
        self.straight_epsilon = straight_epsilon

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def analyze_window(self, points: Sequence[RoutePoint]) -> TurnCandidate | None:
        """Analyze one window of consecutive points.

        Returns:
            A :class:`TurnCandidate`, or ``None`` if the window is not a turn
            (too few points, a degenerate vector, or an invalid angle).

        Raises:
            TurnGeometryError: If a coordinate is not a finite number.
        """
        if len(points) < WINDOW_SIZE:
            return None

        for pt in points:
            if not (math.isfinite(pt.latitude) and math.isfinite(pt.longitude)):
                raise TurnGeometryError(
                    f"Non-finite coordinate at point {pt.order}: "
                    f"({pt.latitude}, {pt.longitude})"
                )

        mid = len(points) // 2
        start, center, end = points[0], points[mid], points[-1]

        incoming = Vector2D(
            dx=center.longitude - start.longitude,
            dy=center.latitude - start.latitude,
        )
        outgoing = Vector2D(
            dx=end.longitude - center.longitude,
            dy=end.latitude - center.latitude,
        )
        if incoming.is_degenerate() or outgoing.is_degenerate():
            _logger.debug("Window at point %d rejected: repeated coordinates", center.order)
            return None

        angle = vector_angle_degrees(incoming, outgoing)
        if math.isnan(angle) or angle < 0 or angle > 180:
            _logger.debug("Window at point %d rejected: angle %s", center.order, angle)
            return None
        angle = round(angle, 1)

        cross = unit_cross_product(incoming, outgoing)
        chord = distance_km(start, end)
        radius = float(max(MIN_RADIUS_M, round(radius_from_chord_and_angle(chord, angle))))

        return TurnCandidate(
            center=center,
            preceding=tuple(points[:mid]),
            following=tuple(points[mid + 1:]),
            incoming=incoming,
            outgoing=outgoing,
            angle=angle,
            direction=turn_direction(cross, self.straight_epsilon),
            cross_product=cross,
            chord_km=chord,
            radius_m=radius,
            banking_angle=estimate_banking_angle(radius),
            confidence=turn_confidence(points, angle),
        )

    def windows(self, points: Sequence[RoutePoint]) -> Iterator[tuple[int, Sequence[RoutePoint]]]:
        """Yield ``(center_index, window)`` for every interior point.

        The first and last two points lack a full window and are skipped.
        """
        for i in range(HALF_WINDOW, len(points) - HALF_WINDOW):
            yield i, points[i - HALF_WINDOW:i + HALF_WINDOW + 1]
