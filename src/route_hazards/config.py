"""Analysis configuration.

Values default to the production thresholds and can be overridden through
``ROUTE_HAZARDS_*`` environment variables (a ``.env`` file is loaded by the
web app and the CLI before :meth:`AnalysisConfig.from_env` is called).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields

DEFAULT_DB_PATH = "route_hazards.db"


def default_db_path() -> str:
    return os.environ.get("ROUTE_HAZARDS_DB", DEFAULT_DB_PATH)


@dataclass(frozen=True)
class AnalysisConfig:
    """Thresholds and resource limits for one route analysis."""

    min_points: int = 5
    """Routes with fewer points fail validation."""

    min_risk_score: float = 5.0
    """A turn is kept if its risk reaches this score ..."""

    min_turn_angle: float = 25.0
    """... or if its angle reaches this many degrees."""

    max_windows: int = 20_000
    """Upper bound on windows scanned per route; the remainder is skipped."""

    deadline_s: float = 60.0
    """Wall-clock budget for one ``analyze_route`` invocation."""

    @classmethod
    def from_env(cls, prefix: str = "ROUTE_HAZARDS_") -> AnalysisConfig:
        """Build a config from environment variables such as ``ROUTE_HAZARDS_DEADLINE_S``."""
        overrides: dict[str, object] = {}
        for f in fields(cls):
            raw = os.environ.get(prefix + f.name.upper())
            if raw is None or raw == "":
                continue
            cast = int if f.type in ("int", int) else float
            try:
                overrides[f.name] = cast(raw)
            except ValueError as exc:
                raise ValueError(f"Invalid value for {prefix}{f.name.upper()}: {raw!r}") from exc
        return cls(**overrides)
