"""Environmental context estimation for turn locations.

Ground-truth attributes such as guardrails or lighting are not available for
arbitrary coordinates, so they are estimated from whether a point lies in an
urban area.  Estimation is a pluggable strategy: every implementation is
deterministic for a given point, which keeps repeated analyses of an
unchanged route identical.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Protocol

from route_hazards.geometry.models import RoutePoint
from route_hazards.scoring.models import EnvironmentalContext, RoadSurface, Visibility

RURAL_RISK = 1.0


@dataclass(frozen=True)
class CityArea:
    """A city centroid with a planar radius in degrees."""

    name: str
    latitude: float
    longitude: float
    radius_deg: float


MAJOR_CITIES: tuple[CityArea, ...] = (
    CityArea("Delhi", 28.7, 77.2, 0.5),
    CityArea("Mumbai", 19.0, 72.8, 0.3),
    CityArea("Bangalore", 13.0, 77.6, 0.3),
    CityArea("Kolkata", 22.6, 88.4, 0.3),
    CityArea("Hyderabad", 17.4, 78.5, 0.3),
)


def is_urban(point: RoutePoint, cities: tuple[CityArea, ...] = MAJOR_CITIES) -> bool:
    """Return True if *point* lies within the radius of any city in *cities*."""
    return any(
        math.hypot(point.latitude - c.latitude, point.longitude - c.longitude) < c.radius_deg
        for c in cities
    )


class EnvironmentEstimator(Protocol):
    """Strategy that supplies the environmental context for a point."""

    def estimate(self, point: RoutePoint) -> EnvironmentalContext: ...


class UrbanProximityEstimator:
    """Deterministic lookup: urban points get lighting, signage and good surface.

    Rural points carry one extra risk point and are assumed to have neither
    guardrails nor warning signs.
    """

    def __init__(self, cities: tuple[CityArea, ...] = MAJOR_CITIES) -> None:
        self._cities = cities

    def estimate(self, point: RoutePoint) -> EnvironmentalContext:
        if is_urban(point, self._cities):
            return EnvironmentalContext(
                visibility=Visibility.GOOD,
                road_surface=RoadSurface.GOOD,
                guardrails=False,
                warning_signs=True,
                lighting=True,
            )
        return EnvironmentalContext(
            visibility=Visibility.GOOD,
            road_surface=RoadSurface.GOOD,
            guardrails=False,
            warning_signs=False,
            lighting=False,
            additional_risk=RURAL_RISK,
        )


class SeededEnvironmentEstimator:
    """Samples unknown attributes with fixed odds from an explicit seed.

    The generator for each point is seeded from ``seed`` and the point's
    coordinates, so a point's context never depends on the order in which
    points are estimated.

    Parameters
    ----------
    seed:
        Any hashable-to-string value; identical seeds give identical contexts.
    """

    def __init__(self, seed: int | str = 0, cities: tuple[CityArea, ...] = MAJOR_CITIES) -> None:
        self._seed = seed
        self._cities = cities

    def estimate(self, point: RoutePoint) -> EnvironmentalContext:
        rng = random.Random(f"{self._seed}:{point.latitude:.6f}:{point.longitude:.6f}")

        if is_urban(point, self._cities):
            return EnvironmentalContext(
                lighting=rng.random() > 0.3,
                warning_signs=rng.random() > 0.4,
                road_surface=RoadSurface.GOOD if rng.random() > 0.2 else RoadSurface.FAIR,
            )
        return EnvironmentalContext(
            visibility=Visibility.LIMITED if rng.random() > 0.7 else Visibility.GOOD,
            guardrails=rng.random() > 0.8,
            warning_signs=rng.random() > 0.6,
            additional_risk=RURAL_RISK,
        )


class FixedEnvironmentEstimator:
    """Returns the same context for every point."""

    def __init__(self, context: EnvironmentalContext | None = None) -> None:
        self._context = context or EnvironmentalContext()

    def estimate(self, point: RoutePoint) -> EnvironmentalContext:
        return self._context
