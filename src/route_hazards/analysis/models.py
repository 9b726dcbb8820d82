"""Analysis result models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from route_hazards.reporting.models import Recommendation
from route_hazards.scoring.risk import is_critical
from route_hazards.storage.models import BlindSpot, SharpTurn


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


def severity_breakdown(turns: list[SharpTurn]) -> dict[str, int]:
    counts = {"hairpin": 0, "sharp": 0, "moderate": 0, "gentle": 0}
    for t in turns:
        counts[t.turn_severity.value] += 1
    return counts


@dataclass
class TurnScanResult:
    """Outcome of the sharp-turn scan over a whole route."""

    turns: list[SharpTurn] = field(default_factory=list)
    windows_scanned: int = 0
    skipped: int = 0
    """Windows or records dropped because analysis or persistence failed."""

    truncated: bool = False
    """True if the route had more windows than the configured cap."""

    error: str | None = None

    @property
    def total_count(self) -> int:
        return len(self.turns)

    @property
    def avg_risk_score(self) -> float:
        if not self.turns:
            return 0.0
        return round(sum(t.risk_score for t in self.turns) / len(self.turns), 2)

    @property
    def critical_turns(self) -> int:
        return sum(1 for t in self.turns if is_critical(t.risk_score))

    @classmethod
    def failed(cls, message: str) -> TurnScanResult:
        return cls(error=message)

    def to_dict(self) -> dict:
        return {
            "turns": [t.to_dict() for t in self.turns],
            "total_count": self.total_count,
            "avg_risk_score": self.avg_risk_score,
            "critical_turns": self.critical_turns,
            "severity_breakdown": severity_breakdown(self.turns),
            "windows_scanned": self.windows_scanned,
            "skipped": self.skipped,
            "truncated": self.truncated,
            "error": self.error,
        }


@dataclass
class BlindSpotAnalysis:
    """Output contract of a blind-spot analyzer.

    ``recommendations`` holds the analyzer's own advisories as plain dicts
    (``priority``, ``category``, ``title``, ``description``, ``actions``);
    they are forwarded into the final advisory list.
    """

    total_blind_spots: int = 0
    blind_spots: list[BlindSpot] = field(default_factory=list)
    risk_score: float = 0.0
    """Average risk score over the spots."""

    critical_count: int = 0
    by_type: dict[str, int] = field(default_factory=dict)
    confidence: float = 0.8
    recommendations: list[dict] = field(default_factory=list)
    error: str | None = None

    @classmethod
    def degraded(cls, message: str) -> BlindSpotAnalysis:
        """Empty result substituted when the analyzer fails."""
        return cls(confidence=0.5, error=message)

    @classmethod
    def from_dict(cls, data: dict) -> BlindSpotAnalysis:
        """Accept the analyzer contract as a JSON-style dict.

        ``blind_spots`` entries may be :class:`BlindSpot` objects or row-style
        dicts.
        """
        risk = data.get("risk_analysis") or {}
        spots = [
            s if isinstance(s, BlindSpot) else BlindSpot.from_dict(s)
            for s in data.get("blind_spots") or []
        ]
        return cls(
            total_blind_spots=int(data.get("total_blind_spots", len(spots))),
            blind_spots=spots,
            risk_score=float(risk.get("score", 0.0)),
            critical_count=int(risk.get("critical_count", 0)),
            by_type=dict(data.get("by_type") or {}),
            confidence=float(data.get("confidence", 0.8)),
            recommendations=list(data.get("recommendations") or []),
            error=data.get("error"),
        )

    def to_dict(self) -> dict:
        return {
            "spots": [s.to_dict() for s in self.blind_spots],
            "total_count": self.total_blind_spots,
            "avg_risk_score": self.risk_score,
            "critical_blind_spots": self.critical_count,
            "type_breakdown": self.by_type,
            "confidence": self.confidence,
            "error": self.error,
        }


@dataclass
class AnalysisSummary:
    total_sharp_turns: int
    critical_turns: int
    total_blind_spots: int
    critical_blind_spots: int
    avg_turn_risk: float
    avg_blind_spot_risk: float
    overall_risk_level: RiskLevel
    analysis_success: bool
    """False if either subsystem failed and was replaced by a degraded result."""

    def to_dict(self) -> dict:
        return {
            "total_sharp_turns": self.total_sharp_turns,
            "critical_turns": self.critical_turns,
            "total_blind_spots": self.total_blind_spots,
            "critical_blind_spots": self.critical_blind_spots,
            "avg_turn_risk": self.avg_turn_risk,
            "avg_blind_spot_risk": self.avg_blind_spot_risk,
            "overall_risk_level": self.overall_risk_level.value,
            "analysis_success": self.analysis_success,
        }


@dataclass
class AnalysisResult:
    """Everything one ``analyze_route`` invocation produced.  Never persisted."""

    route_id: str
    route_name: str
    analysis_date: str
    sharp_turns: TurnScanResult
    blind_spots: BlindSpotAnalysis
    summary: AnalysisSummary
    recommendations: list[Recommendation]

    def to_dict(self) -> dict:
        """Return a JSON-serializable dict."""
        return {
            "route_id": self.route_id,
            "route_name": self.route_name,
            "analysis_date": self.analysis_date,
            "sharp_turns": self.sharp_turns.to_dict(),
            "blind_spots": self.blind_spots.to_dict(),
            "summary": self.summary.to_dict(),
            "recommendations": [r.to_dict() for r in self.recommendations],
        }
