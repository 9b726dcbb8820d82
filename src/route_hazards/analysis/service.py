"""RouteAnalysisService — sharp-turn scan, blind-spot analysis and aggregation.

One ``analyze_route`` call moves through
``Validating → ScanningTurns ∥ AnalyzingBlindSpots → Aggregating → Done``.
Only validation failures are raised; a failing subsystem is replaced by a
degraded result carrying its error message.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from collections.abc import Iterator
from concurrent.futures import Future, ThreadPoolExecutor, wait
from contextlib import contextmanager
from itertools import islice

from route_hazards.analysis.blind_spots import BlindSpotAnalyzer, StoredBlindSpotAnalyzer
from route_hazards.analysis.models import (
    AnalysisResult,
    AnalysisSummary,
    BlindSpotAnalysis,
    RiskLevel,
    TurnScanResult,
)
from route_hazards.config import AnalysisConfig
from route_hazards.errors import InsufficientGpsPoints, RouteNotFound
from route_hazards.geometry.analyzer import TurnGeometryAnalyzer
from route_hazards.reporting.recommendations import RecommendationGenerator
from route_hazards.scoring.environment import EnvironmentEstimator, UrbanProximityEstimator
from route_hazards.scoring.risk import TurnRiskScorer, is_critical
from route_hazards.storage.models import Route, SharpTurn
from route_hazards.storage.storage import HazardStorage, utc_timestamp

_logger = logging.getLogger(__name__)

_route_locks: dict[str, threading.Lock] = {}
_route_locks_guard = threading.Lock()


@contextmanager
def _route_write_lock(route_id: str) -> Iterator[None]:
    """Serialize sharp-turn writes per route within this process."""
    with _route_locks_guard:
        lock = _route_locks.setdefault(route_id, threading.Lock())
    with lock:
        yield


def overall_risk_level(total_turns: int, total_blind_spots: int, critical_blind_spots: int) -> RiskLevel:
    """Route-level risk from hazard counts."""
    critical_points = total_turns + critical_blind_spots

    if critical_blind_spots > 3 or critical_points > 8:
        return RiskLevel.CRITICAL
    if critical_blind_spots > 1 or critical_points > 5:
        return RiskLevel.HIGH
    if total_blind_spots > 2 or total_turns > 2:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


class RouteAnalysisService:
    """Runs the full visibility-hazard analysis of a stored route.

    Parameters
    ----------
    db_path:
        Path to the SQLite database holding routes and hazards.
    blind_spot_analyzer:
        External analyzer; defaults to :class:`StoredBlindSpotAnalyzer` on
        the same database.
    environment:
        Environmental context strategy; defaults to the deterministic
        :class:`UrbanProximityEstimator`.
    config:
        Thresholds and limits; defaults to :meth:`AnalysisConfig.from_env`.
    """

    def __init__(
        self,
        db_path: str,
        blind_spot_analyzer: BlindSpotAnalyzer | None = None,
        environment: EnvironmentEstimator | None = None,
        config: AnalysisConfig | None = None,
        geometry: TurnGeometryAnalyzer | None = None,
        scorer: TurnRiskScorer | None = None,
    ) -> None:
        self._db_path = db_path
        self._blind_spots = blind_spot_analyzer or StoredBlindSpotAnalyzer(db_path)
        self._environment = environment or UrbanProximityEstimator()
        self._config = config or AnalysisConfig.from_env()
        self._geometry = geometry or TurnGeometryAnalyzer()
        self._scorer = scorer or TurnRiskScorer()
        self._recommender = RecommendationGenerator()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def analyze_route(self, route_id: str) -> AnalysisResult:
        """Analyze *route_id* and return the assembled result.

        Raises
        ------
        RouteNotFound
            If the route does not exist.
        InsufficientGpsPoints
            If the route has fewer than ``config.min_points`` points.
            Nothing is written in either case.
        """
        _logger.info("Route %s: validating", route_id)
        route = self._load_route(route_id)

        deadline = time.monotonic() + self._config.deadline_s

        _logger.info(
            "Route %s: scanning %d points for sharp turns and blind spots",
            route_id,
            len(route.points),
        )
        pool = ThreadPoolExecutor(max_workers=2, thread_name_prefix="route-analysis")
        try:
            turn_future = pool.submit(self._scan_turns, route, deadline)
            spot_future = pool.submit(self._blind_spots.analyze_all_blind_spots, route_id)
            turns = self._collect_turns(route_id, turn_future)
            spots = self._collect_blind_spots(route_id, spot_future, deadline)
        finally:
            pool.shutdown(wait=False, cancel_futures=True)

        _logger.info("Route %s: aggregating", route_id)
        result = self._aggregate(route, turns, spots)

        _logger.info(
            "Route %s: done, %d sharp turns (%d critical), %d blind spots, risk %s",
            route_id,
            result.summary.total_sharp_turns,
            result.summary.critical_turns,
            result.summary.total_blind_spots,
            result.summary.overall_risk_level.value,
        )
        return result

    # ------------------------------------------------------------------
    # Validating
    # ------------------------------------------------------------------

    def _load_route(self, route_id: str) -> Route:
        storage = HazardStorage(self._db_path)
        try:
            route = storage.get_route(route_id)
        finally:
            storage.close()

        if route is None:
            _logger.warning("Route %s: not found", route_id)
            raise RouteNotFound(route_id)
        if len(route.points) < self._config.min_points:
            _logger.warning(
                "Route %s: only %d points, %d required",
                route_id,
                len(route.points),
                self._config.min_points,
            )
            raise InsufficientGpsPoints(route_id, len(route.points), self._config.min_points)
        return route

    # ------------------------------------------------------------------
    # ScanningTurns
    # ------------------------------------------------------------------

    def _scan_turns(self, route: Route, deadline: float) -> TurnScanResult:
        """Detect, score and persist the sharp turns of *route*.

        Nothing is written if the deadline passes mid-scan; the previously
        stored turns stay in place.
        """
        cfg = self._config
        windows = list(islice(self._geometry.windows(route.points), cfg.max_windows + 1))
        truncated = len(windows) > cfg.max_windows
        if truncated:
            _logger.warning(
                "Route %s: more than %d windows; scanning the first %d only",
                route.route_id,
                cfg.max_windows,
                cfg.max_windows,
            )
            windows = windows[:cfg.max_windows]

        kept: list[SharpTurn] = []
        skipped = 0
        for i, window in windows:
            if time.monotonic() > deadline:
                raise TimeoutError(
                    f"Sharp turn scan exceeded the {cfg.deadline_s:g}s deadline at point {i}"
                )
            try:
                candidate = self._geometry.analyze_window(window)
                if candidate is None:
                    continue
                context = self._environment.estimate(candidate.center)
                risk = self._scorer.score(candidate, route.terrain, context)
            except Exception as exc:
                skipped += 1
                _logger.warning("Route %s: turn analysis failed at point %d: %s", route.route_id, i, exc)
                continue

            if risk.risk_score >= cfg.min_risk_score or candidate.angle >= cfg.min_turn_angle:
                kept.append(SharpTurn.from_analysis(route.route_id, candidate, risk))
                _logger.debug(
                    "Route %s: turn at point %d: %.1f° %s, risk %.1f",
                    route.route_id,
                    i,
                    candidate.angle,
                    candidate.direction.value,
                    risk.risk_score,
                )

        run_id = uuid.uuid4().hex
        with _route_write_lock(route.route_id):
            storage = HazardStorage(self._db_path)
            try:
                saved, failed = storage.replace_sharp_turns(
                    route.route_id, kept, run_id, created_at=utc_timestamp()
                )
            finally:
                storage.close()

        for turn, exc in failed:
            _logger.warning(
                "Route %s: failed to save sharp turn at (%.6f, %.6f): %s",
                route.route_id,
                turn.latitude,
                turn.longitude,
                exc,
            )

        return TurnScanResult(
            turns=saved,
            windows_scanned=len(windows),
            skipped=skipped + len(failed),
            truncated=truncated,
        )

    def _collect_turns(self, route_id: str, future: Future) -> TurnScanResult:
        try:
            return future.result()
        except Exception as exc:
            _logger.error("Route %s: sharp turn analysis failed: %s", route_id, exc)
            return TurnScanResult.failed(str(exc))

    # ------------------------------------------------------------------
    # AnalyzingBlindSpots
    # ------------------------------------------------------------------

    def _collect_blind_spots(
        self, route_id: str, future: Future, deadline: float
    ) -> BlindSpotAnalysis:
        timeout = max(0.0, deadline - time.monotonic())
        done, _ = wait([future], timeout=timeout)
        if not done:
            message = f"Blind spot analysis exceeded the {self._config.deadline_s:g}s deadline"
        else:
            try:
                result = future.result()
                if isinstance(result, dict):
                    result = BlindSpotAnalysis.from_dict(result)
                return result
            except Exception as exc:
                message = str(exc) or type(exc).__name__

        _logger.error("Route %s: blind spot analysis failed: %s", route_id, message)
        return BlindSpotAnalysis.degraded(message)

    # ------------------------------------------------------------------
    # Aggregating
    # ------------------------------------------------------------------

    def _aggregate(
        self, route: Route, turns: TurnScanResult, spots: BlindSpotAnalysis
    ) -> AnalysisResult:
        summary = AnalysisSummary(
            total_sharp_turns=turns.total_count,
            critical_turns=sum(1 for t in turns.turns if is_critical(t.risk_score)),
            total_blind_spots=spots.total_blind_spots,
            critical_blind_spots=spots.critical_count,
            avg_turn_risk=turns.avg_risk_score,
            avg_blind_spot_risk=spots.risk_score,
            overall_risk_level=overall_risk_level(
                turns.total_count, spots.total_blind_spots, spots.critical_count
            ),
            analysis_success=turns.error is None and spots.error is None,
        )
        recommendations = self._recommender.generate(
            turns.turns, spots.blind_spots, spots.recommendations
        )
        return AnalysisResult(
            route_id=route.route_id,
            route_name=route.name,
            analysis_date=utc_timestamp(),
            sharp_turns=turns,
            blind_spots=spots,
            summary=summary,
            recommendations=recommendations,
        )
