"""HazardStorage — persists routes and visibility hazards to SQLite.

Schema design notes:
  - ``routes`` lookup table: hazards and points reference the integer
    ``idx`` rather than repeating the external ``route_id`` string per row.
  - ``sharp_turns`` carries CHECK constraints mirroring the record's value
    ranges, so an out-of-range row fails on insert instead of being stored.
  - ``analysis_method`` is constrained to the closed :class:`AnalysisMethod`
    set.
  - The connection runs in autocommit mode; multi-statement writes use an
    explicit ``BEGIN IMMEDIATE`` transaction.  With WAL journaling a reader
    sees either the last committed set of turns or the new one, never a mix.
"""

from __future__ import annotations

import contextlib
import logging
import sqlite3
from collections.abc import Iterator
from datetime import datetime, timezone

from route_hazards.errors import PersistenceError
from route_hazards.geometry.models import RoutePoint
from route_hazards.storage.models import AnalysisMethod, BlindSpot, Route, SharpTurn

_logger = logging.getLogger(__name__)

_METHODS = ", ".join(f"'{m.value}'" for m in AnalysisMethod)

_DDL = f"""
PRAGMA journal_mode = WAL;
PRAGMA synchronous  = NORMAL;
PRAGMA foreign_keys = ON;

CREATE TABLE IF NOT EXISTS routes (
    idx        INTEGER PRIMARY KEY,
    route_id   TEXT    NOT NULL UNIQUE,
    name       TEXT    NOT NULL DEFAULT '',
    terrain    TEXT    NOT NULL DEFAULT 'flat'
);

CREATE TABLE IF NOT EXISTS route_points (
    route_idx              INTEGER NOT NULL REFERENCES routes (idx) ON DELETE CASCADE,
    point_order            INTEGER NOT NULL,
    latitude               REAL    NOT NULL,
    longitude              REAL    NOT NULL,
    distance_from_start_km REAL    NOT NULL DEFAULT 0,
    distance_to_end_km     REAL    NOT NULL DEFAULT 0,
    PRIMARY KEY (route_idx, point_order)
);

CREATE TABLE IF NOT EXISTS sharp_turns (
    id                     INTEGER PRIMARY KEY,
    route_idx              INTEGER NOT NULL REFERENCES routes (idx) ON DELETE CASCADE,
    run_id                 TEXT    NOT NULL,
    created_at             TEXT    NOT NULL,
    latitude               REAL    NOT NULL CHECK (latitude BETWEEN -90 AND 90),
    longitude              REAL    NOT NULL CHECK (longitude BETWEEN -180 AND 180),
    distance_from_start_km REAL    NOT NULL CHECK (distance_from_start_km >= 0),
    turn_angle             REAL    NOT NULL CHECK (turn_angle BETWEEN 0 AND 180),
    turn_direction         TEXT    NOT NULL
                           CHECK (turn_direction IN ('left', 'right', 'hairpin', 'straight')),
    turn_radius            REAL    NOT NULL CHECK (turn_radius >= 0),
    recommended_speed      REAL    NOT NULL CHECK (recommended_speed BETWEEN 15 AND 80),
    risk_score             REAL    NOT NULL CHECK (risk_score BETWEEN 1 AND 10),
    turn_severity          TEXT    NOT NULL
                           CHECK (turn_severity IN ('gentle', 'moderate', 'sharp', 'hairpin')),
    confidence             REAL    NOT NULL CHECK (confidence BETWEEN 0 AND 1),
    visibility             TEXT    NOT NULL,
    road_surface           TEXT    NOT NULL,
    guardrails             INTEGER NOT NULL,
    warning_signs          INTEGER NOT NULL,
    lighting               INTEGER NOT NULL,
    banking_angle          REAL    NOT NULL DEFAULT 0,
    analysis_method        TEXT    NOT NULL CHECK (analysis_method IN ({_METHODS}))
);

CREATE INDEX IF NOT EXISTS idx_sharp_turns_route
    ON sharp_turns (route_idx, distance_from_start_km);

CREATE TABLE IF NOT EXISTS blind_spots (
    id                     INTEGER PRIMARY KEY,
    route_idx              INTEGER NOT NULL REFERENCES routes (idx) ON DELETE CASCADE,
    created_at             TEXT    NOT NULL,
    latitude               REAL    NOT NULL CHECK (latitude BETWEEN -90 AND 90),
    longitude              REAL    NOT NULL CHECK (longitude BETWEEN -180 AND 180),
    distance_from_start_km REAL    NOT NULL DEFAULT 0,
    spot_type              TEXT    NOT NULL,
    visibility_distance    REAL    NOT NULL CHECK (visibility_distance >= 0),
    risk_score             REAL    NOT NULL CHECK (risk_score BETWEEN 1 AND 10),
    severity_level         TEXT    NOT NULL,
    analysis_method        TEXT    NOT NULL CHECK (analysis_method IN ({_METHODS}))
);

CREATE INDEX IF NOT EXISTS idx_blind_spots_route
    ON blind_spots (route_idx, distance_from_start_km);
"""

_SELECT_ROUTE_IDX = "SELECT idx FROM routes WHERE route_id = ?"

_INSERT_POINT = """
INSERT INTO route_points (
    route_idx, point_order, latitude, longitude,
    distance_from_start_km, distance_to_end_km
) VALUES (?, ?, ?, ?, ?, ?)
"""

_INSERT_SHARP_TURN = """
INSERT INTO sharp_turns (
    route_idx, run_id, created_at,
    latitude, longitude, distance_from_start_km,
    turn_angle, turn_direction, turn_radius, recommended_speed,
    risk_score, turn_severity, confidence,
    visibility, road_surface, guardrails, warning_signs, lighting,
    banking_angle, analysis_method
) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""

_INSERT_BLIND_SPOT = """
INSERT INTO blind_spots (
    route_idx, created_at, latitude, longitude, distance_from_start_km,
    spot_type, visibility_distance, risk_score, severity_level, analysis_method
) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""

_RISK_LEVEL_FILTERS: dict[str, str] = {
    "all": "",
    "low": "AND h.risk_score < 4",
    "medium": "AND h.risk_score >= 4 AND h.risk_score < 6",
    "high": "AND h.risk_score >= 6 AND h.risk_score < 8",
    "critical": "AND h.risk_score >= 8",
}

_SORT_ORDERS: dict[str, str] = {
    "distance": "h.distance_from_start_km ASC, h.id ASC",
    "risk": "h.risk_score DESC, h.distance_from_start_km ASC",
}

RISK_LEVELS = tuple(_RISK_LEVEL_FILTERS)
SORT_ORDERS = tuple(_SORT_ORDERS)


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string with microseconds."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class HazardStorage:
    """Stores and retrieves routes and their visibility hazards from SQLite.

    Parameters
    ----------
    db_path:
        Path to the SQLite file.  Pass ``":memory:"`` for in-process testing.
    timeout:
        Seconds to wait for a competing writer's lock.
    """

    def __init__(self, db_path: str = "route_hazards.db", timeout: float = 10.0) -> None:
        self._conn = sqlite3.connect(db_path, timeout=timeout, isolation_level=None)
        self._conn.row_factory = sqlite3.Row
        for stmt in _DDL.strip().split(";"):
            stmt = stmt.strip()
            if stmt:
                self._conn.execute(stmt)

    # ------------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------------

    def save_route(self, route: Route) -> None:
        """Create or overwrite *route* and its ordered points."""
        with self._transaction():
            self._conn.execute(
                """
                INSERT INTO routes (route_id, name, terrain) VALUES (?, ?, ?)
                ON CONFLICT (route_id) DO UPDATE SET name = excluded.name,
                                                     terrain = excluded.terrain
                """,
                (route.route_id, route.name, route.terrain),
            )
            idx = self._route_idx(route.route_id)
            self._conn.execute("DELETE FROM route_points WHERE route_idx = ?", (idx,))
            self._conn.executemany(
                _INSERT_POINT,
                [
                    (
                        idx,
                        order,
                        p.latitude,
                        p.longitude,
                        p.distance_from_start_km,
                        p.distance_to_end_km,
                    )
                    for order, p in enumerate(route.points)
                ],
            )

    def get_route(self, route_id: str) -> Route | None:
        """Return the route with its points in travel order, or None if not found."""
        row = self._conn.execute(
            "SELECT idx, route_id, name, terrain FROM routes WHERE route_id = ?",
            (route_id,),
        ).fetchone()
        if row is None:
            return None

        cursor = self._conn.execute(
            """
            SELECT point_order, latitude, longitude,
                   distance_from_start_km, distance_to_end_km
            FROM   route_points
            WHERE  route_idx = ?
            ORDER  BY point_order
            """,
            (row["idx"],),
        )
        points = [
            RoutePoint(
                latitude=float(r["latitude"]),
                longitude=float(r["longitude"]),
                order=int(r["point_order"]),
                distance_from_start_km=float(r["distance_from_start_km"]),
                distance_to_end_km=float(r["distance_to_end_km"]),
            )
            for r in cursor.fetchall()
        ]
        return Route(
            route_id=row["route_id"],
            name=row["name"],
            terrain=row["terrain"],
            points=points,
        )

    # ------------------------------------------------------------------
    # Sharp turns
    # ------------------------------------------------------------------

    def replace_sharp_turns(
        self,
        route_id: str,
        turns: list[SharpTurn],
        run_id: str,
        created_at: str | None = None,
    ) -> tuple[list[SharpTurn], list[tuple[SharpTurn, PersistenceError]]]:
        """Atomically replace every sharp turn of *route_id* with *turns*.

        The delete and all inserts run in one transaction.  Each insert runs
        inside its own savepoint: a row that fails validation or a constraint
        is rolled back alone and reported, and the remaining rows still commit.

        Returns
        -------
        tuple
            ``(saved, failed)``: the stored records (with ``id``, ``run_id``
            and ``created_at`` set) and ``(turn, error)`` pairs for rows that
            were skipped.

        Raises
        ------
        PersistenceError
            If the route does not exist or the transaction itself fails.
        """
        created_at = created_at or utc_timestamp()
        saved: list[SharpTurn] = []
        failed: list[tuple[SharpTurn, PersistenceError]] = []

        try:
            with self._transaction():
                idx = self._route_idx(route_id)
                if idx is None:
                    raise PersistenceError(f"Route not found: {route_id!r}")
                self._conn.execute("DELETE FROM sharp_turns WHERE route_idx = ?", (idx,))

                for turn in turns:
                    try:
                        turn.validate()
                        with self._savepoint():
                            cursor = self._conn.execute(
                                _INSERT_SHARP_TURN,
                                self._sharp_turn_params(idx, turn, run_id, created_at),
                            )
                    except PersistenceError as exc:
                        failed.append((turn, exc))
                        continue
                    except sqlite3.IntegrityError as exc:
                        failed.append((turn, PersistenceError(str(exc))))
                        continue
                    turn.id = cursor.lastrowid
                    turn.run_id = run_id
                    turn.created_at = created_at
                    saved.append(turn)
        except sqlite3.Error as exc:
            raise PersistenceError(f"Sharp turn replace failed for {route_id!r}: {exc}") from exc

        return saved, failed

    def list_sharp_turns(
        self,
        route_id: str,
        risk_level: str = "all",
        sort: str = "distance",
    ) -> list[SharpTurn]:
        """Return the sharp turns of *route_id*.

        Args:
            risk_level: One of ``all``, ``low`` (<4), ``medium`` [4, 6),
                ``high`` [6, 8) or ``critical`` (>=8).
            sort: ``distance`` (ascending from start) or ``risk`` (descending).

        Raises:
            ValueError: On an unknown *risk_level* or *sort*.
        """
        rows = self._select_hazards("sharp_turns", route_id, risk_level, sort)
        return [SharpTurn.from_row(r) for r in rows]

    # ------------------------------------------------------------------
    # Blind spots
    # ------------------------------------------------------------------

    def save_blind_spots(self, route_id: str, spots: list[BlindSpot]) -> list[BlindSpot]:
        """Append blind spots for *route_id* (written by the sight-distance calculator)."""
        created_at = utc_timestamp()
        try:
            with self._transaction():
                idx = self._route_idx(route_id)
                if idx is None:
                    raise PersistenceError(f"Route not found: {route_id!r}")
                for spot in spots:
                    spot.validate()
                    cursor = self._conn.execute(
                        _INSERT_BLIND_SPOT,
                        (
                            idx,
                            created_at,
                            spot.latitude,
                            spot.longitude,
                            spot.distance_from_start_km,
                            spot.spot_type.value,
                            spot.visibility_distance,
                            spot.risk_score,
                            spot.severity_level.value,
                            spot.analysis_method.value,
                        ),
                    )
                    spot.id = cursor.lastrowid
                    spot.route_id = route_id
                    spot.created_at = created_at
        except sqlite3.Error as exc:
            raise PersistenceError(f"Blind spot write failed for {route_id!r}: {exc}") from exc
        return spots

    def list_blind_spots(
        self,
        route_id: str,
        risk_level: str = "all",
        sort: str = "distance",
    ) -> list[BlindSpot]:
        """Return the blind spots of *route_id*; same filters as :meth:`list_sharp_turns`."""
        rows = self._select_hazards("blind_spots", route_id, risk_level, sort)
        return [BlindSpot.from_row(r) for r in rows]

    # ------------------------------------------------------------------
    # Statistics and maintenance
    # ------------------------------------------------------------------

    def sharp_turn_stats(self, route_id: str) -> dict:
        """Aggregate counts and scores over the sharp turns of *route_id*."""
        row = self._conn.execute(
            """
            SELECT COUNT(*)                                            AS total,
                   COALESCE(AVG(t.risk_score), 0)                      AS avg_risk_score,
                   COALESCE(MAX(t.risk_score), 0)                      AS max_risk_score,
                   COALESCE(SUM(t.risk_score >= 8), 0)                 AS critical,
                   COALESCE(SUM(t.risk_score >= 6 AND t.risk_score < 8), 0) AS high,
                   COALESCE(SUM(t.turn_severity = 'hairpin'), 0)       AS hairpin,
                   COALESCE(SUM(t.turn_severity = 'sharp'), 0)         AS sharp,
                   COALESCE(SUM(t.turn_severity = 'moderate'), 0)      AS moderate,
                   COALESCE(SUM(t.turn_severity = 'gentle'), 0)        AS gentle
            FROM   sharp_turns t
            JOIN   routes r ON r.idx = t.route_idx
            WHERE  r.route_id = ?
            """,
            (route_id,),
        ).fetchone()
        return {
            "total": row["total"],
            "average_risk_score": round(row["avg_risk_score"], 2),
            "max_risk_score": row["max_risk_score"],
            "critical": row["critical"],
            "high": row["high"],
            "severity_breakdown": {
                "hairpin": row["hairpin"],
                "sharp": row["sharp"],
                "moderate": row["moderate"],
                "gentle": row["gentle"],
            },
        }

    def blind_spot_stats(self, route_id: str) -> dict:
        """Aggregate counts, scores and sight distances over the blind spots of *route_id*."""
        row = self._conn.execute(
            """
            SELECT COUNT(*)                                            AS total,
                   COALESCE(AVG(b.risk_score), 0)                      AS avg_risk_score,
                   COALESCE(MAX(b.risk_score), 0)                      AS max_risk_score,
                   COALESCE(SUM(b.risk_score >= 8), 0)                 AS critical,
                   COALESCE(SUM(b.risk_score >= 6 AND b.risk_score < 8), 0) AS high,
                   COALESCE(AVG(b.visibility_distance), 0)             AS avg_visibility,
                   COALESCE(SUM(b.visibility_distance < 100), 0)       AS poor_visibility
            FROM   blind_spots b
            JOIN   routes r ON r.idx = b.route_idx
            WHERE  r.route_id = ?
            """,
            (route_id,),
        ).fetchone()
        type_rows = self._conn.execute(
            """
            SELECT b.spot_type, COUNT(*) AS n
            FROM   blind_spots b
            JOIN   routes r ON r.idx = b.route_idx
            WHERE  r.route_id = ?
            GROUP  BY b.spot_type
            """,
            (route_id,),
        ).fetchall()
        return {
            "total": row["total"],
            "average_risk_score": round(row["avg_risk_score"], 2),
            "max_risk_score": row["max_risk_score"],
            "critical": row["critical"],
            "high": row["high"],
            "type_breakdown": {r["spot_type"]: r["n"] for r in type_rows},
            "average_visibility_distance": round(row["avg_visibility"], 2),
            "poor_visibility_spots": row["poor_visibility"],
        }

    def delete_visibility_data(self, route_id: str) -> tuple[int, int]:
        """Delete all sharp turns and blind spots of *route_id*.

        Returns ``(deleted_sharp_turns, deleted_blind_spots)``.
        """
        with self._transaction():
            idx = self._route_idx(route_id)
            if idx is None:
                return 0, 0
            turns = self._conn.execute("DELETE FROM sharp_turns WHERE route_idx = ?", (idx,))
            spots = self._conn.execute("DELETE FROM blind_spots WHERE route_idx = ?", (idx,))
            return turns.rowcount, spots.rowcount

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _route_idx(self, route_id: str) -> int | None:
        row = self._conn.execute(_SELECT_ROUTE_IDX, (route_id,)).fetchone()
        return row[0] if row else None

    @contextlib.contextmanager
    def _transaction(self) -> Iterator[None]:
        self._conn.execute("BEGIN IMMEDIATE")
        try:
            yield
        except BaseException:
            self._conn.execute("ROLLBACK")
            raise
        self._conn.execute("COMMIT")

    @contextlib.contextmanager
    def _savepoint(self) -> Iterator[None]:
        self._conn.execute("SAVEPOINT hazard_row")
        try:
            yield
        except BaseException:
            self._conn.execute("ROLLBACK TO SAVEPOINT hazard_row")
            self._conn.execute("RELEASE SAVEPOINT hazard_row")
            raise
        self._conn.execute("RELEASE SAVEPOINT hazard_row")

    def _select_hazards(
        self, table: str, route_id: str, risk_level: str, sort: str
    ) -> list[dict]:
        if risk_level not in _RISK_LEVEL_FILTERS:
            raise ValueError(
                f"Unknown risk level {risk_level!r}; expected one of {', '.join(RISK_LEVELS)}"
            )
        if sort not in _SORT_ORDERS:
            raise ValueError(f"Unknown sort {sort!r}; expected one of {', '.join(SORT_ORDERS)}")

        cursor = self._conn.execute(
            f"""
            SELECT h.*, r.route_id
            FROM   {table} h
            JOIN   routes r ON r.idx = h.route_idx
            WHERE  r.route_id = ? {_RISK_LEVEL_FILTERS[risk_level]}
            ORDER  BY {_SORT_ORDERS[sort]}
            """,
            (route_id,),
        )
        return [dict(r) for r in cursor.fetchall()]

    @staticmethod
    def _sharp_turn_params(idx: int, turn: SharpTurn, run_id: str, created_at: str) -> tuple:
        return (
            idx,
            run_id,
            created_at,
            turn.latitude,
            turn.longitude,
            turn.distance_from_start_km,
            turn.turn_angle,
            turn.turn_direction.value,
            turn.turn_radius,
            turn.recommended_speed,
            turn.risk_score,
            turn.turn_severity.value,
            turn.confidence,
            turn.visibility.value,
            turn.road_surface.value,
            int(turn.guardrails),
            int(turn.warning_signs),
            int(turn.lighting),
            turn.banking_angle,
            turn.analysis_method.value,
        )
