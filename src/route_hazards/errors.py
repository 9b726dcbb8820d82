"""Typed failures raised by route hazard analysis.

Only :class:`RouteNotFound` and :class:`InsufficientGpsPoints` propagate out of
:meth:`RouteAnalysisService.analyze_route`; the others are recovered inside
the pipeline and surface as error annotations on the returned result.
"""

from __future__ import annotations


class RouteAnalysisError(Exception):
    """Base class for all analysis failures."""


class RouteNotFound(RouteAnalysisError):
    """The requested route does not exist."""

    def __init__(self, route_id: str) -> None:
        super().__init__(f"Route not found: {route_id!r}")
        self.route_id = route_id


class InsufficientGpsPoints(RouteAnalysisError):
    """The route has too few points for a full analysis window."""

    def __init__(self, route_id: str, count: int, required: int) -> None:
        super().__init__(
            f"Insufficient GPS points for analysis of route {route_id!r}: "
            f"{count} found, minimum {required} required"
        )
        self.route_id = route_id
        self.count = count
        self.required = required


class TurnGeometryError(RouteAnalysisError):
    """A single analysis window could not be evaluated."""


class PersistenceError(RouteAnalysisError):
    """A single hazard record could not be written."""


class BlindSpotSubsystemError(RouteAnalysisError):
    """The blind-spot analyzer failed for the whole route."""
