"""Tests for MarkdownFormatter — route visibility report."""

from __future__ import annotations

from route_hazards.analysis.blind_spots import summarize_blind_spots
from route_hazards.analysis.models import (
    AnalysisResult,
    AnalysisSummary,
    BlindSpotAnalysis,
    RiskLevel,
    TurnScanResult,
)
from route_hazards.geometry.models import TurnDirection
from route_hazards.reporting.formatter import MarkdownFormatter
from route_hazards.reporting.recommendations import RecommendationGenerator
from route_hazards.scoring.models import TurnSeverity
from route_hazards.storage.models import SharpTurn
from tests.conftest import make_blind_spot

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _turns(n: int) -> list[SharpTurn]:
    return [
        SharpTurn(
            route_id="R1",
            latitude=1.0,
            longitude=100.0 + i * 0.001,
            distance_from_start_km=i * 0.1,
            turn_angle=40.0 + i,
            turn_direction=TurnDirection.LEFT,
            turn_radius=150.0,
            recommended_speed=50.0,
            risk_score=min(10.0, 4.0 + i * 0.5),
            turn_severity=TurnSeverity.MODERATE,
            confidence=0.9,
        )
        for i in range(n)
    ]


def _result(turns=None, spots=None, turn_error=None, spot_error=None) -> AnalysisResult:
    turns = turns if turns is not None else _turns(2)
    spot_analysis = summarize_blind_spots(spots or [])
    spot_analysis.error = spot_error
    scan = TurnScanResult(turns=turns, error=turn_error)
    return AnalysisResult(
        route_id="R1",
        route_name="Manali - Leh",
        analysis_date="2026-10-18T08:00:00+00:00",
        sharp_turns=scan,
        blind_spots=spot_analysis,
        summary=AnalysisSummary(
            total_sharp_turns=scan.total_count,
            critical_turns=scan.critical_turns,
            total_blind_spots=spot_analysis.total_blind_spots,
            critical_blind_spots=spot_analysis.critical_count,
            avg_turn_risk=scan.avg_risk_score,
            avg_blind_spot_risk=spot_analysis.risk_score,
            overall_risk_level=RiskLevel.MEDIUM,
            analysis_success=turn_error is None and spot_error is None,
        ),
        recommendations=RecommendationGenerator().generate(turns, spots or []),
    )


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestMarkdownFormatter:
    def test_header_and_summary(self):
        md = MarkdownFormatter().format(_result())
        assert md.startswith("# Route Visibility Report: Manali - Leh")
        assert "**Overall risk**: MEDIUM" in md
        assert "- Sharp turns: 2 (0 critical)" in md

    def test_turn_table_rows(self):
        md = MarkdownFormatter().format(_result())
        assert "## Sharp Turns" in md
        assert "| 0.10 | 41.0° | left | 150 m | 50 km/h | 4.5 | moderate |" in md

    def test_rows_capped_highest_risk_first(self):
        md = MarkdownFormatter(max_rows=3).format(_result(turns=_turns(10)))
        table = [line for line in md.splitlines() if line.startswith("| ") and "°" in line]
        assert len(table) == 3
        assert "| 8.5 |" in table[0]

    def test_blind_spot_table(self):
        md = MarkdownFormatter().format(_result(spots=[make_blind_spot(risk_score=8.0)]))
        assert "## Blind Spots" in md
        assert "| 0.10 | crest | 80 m | 8.0 | critical |" in md

    def test_no_tables_when_empty(self):
        md = MarkdownFormatter().format(_result(turns=[]))
        assert "## Sharp Turns" not in md
        assert "## Blind Spots" not in md

    def test_recommendations_section(self):
        md = MarkdownFormatter().format(_result())
        assert "### [HIGH] Sharp Turn Management (2 turns detected)" in md
        assert "### [STANDARD] Mandatory Route Safety Protocol" in md

    def test_partial_failure_warning(self):
        md = MarkdownFormatter().format(_result(spot_error="elevation service unavailable"))
        assert "> **Warning**" in md
        assert "> Blind spots: elevation service unavailable" in md

    def test_no_warning_on_success(self):
        assert "Warning" not in MarkdownFormatter().format(_result())

    def test_write(self, tmp_path):
        out = tmp_path / "report.md"
        MarkdownFormatter().write(_result(), str(out))
        assert out.read_text(encoding="utf-8").startswith("# Route Visibility Report")

    def test_falls_back_to_route_id(self):
        result = _result()
        result.route_name = ""
        assert MarkdownFormatter().format(result).startswith("# Route Visibility Report: R1")


def test_degraded_blind_spots_render():
    result = _result()
    result.blind_spots = BlindSpotAnalysis.degraded("timeout")
    result.summary.analysis_success = False
    md = MarkdownFormatter().format(result)
    assert "> Blind spots: timeout" in md
