"""Markdown advisory report for an analysed route."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from route_hazards.analysis.models import AnalysisResult


def _turn_table(result: AnalysisResult, limit: int) -> list[str]:
    turns = sorted(result.sharp_turns.turns, key=lambda t: -t.risk_score)[:limit]
    lines = [
        "| km | Angle | Direction | Radius | Speed | Risk | Severity |",
        "|----|-------|-----------|--------|-------|------|----------|",
    ]
    for t in turns:
        lines.append(
            f"| {t.distance_from_start_km:.2f} | {t.turn_angle:.1f}° | {t.turn_direction.value} "
            f"| {t.turn_radius:.0f} m | {t.recommended_speed:.0f} km/h "
            f"| {t.risk_score:.1f} | {t.turn_severity.value} |"
        )
    return lines


def _spot_table(result: AnalysisResult, limit: int) -> list[str]:
    spots = sorted(result.blind_spots.blind_spots, key=lambda s: -s.risk_score)[:limit]
    lines = [
        "| km | Type | Sight distance | Risk | Severity |",
        "|----|------|----------------|------|----------|",
    ]
    for s in spots:
        severity = s.severity_level.value if s.severity_level else "-"
        lines.append(
            f"| {s.distance_from_start_km:.2f} | {s.spot_type.value} "
            f"| {s.visibility_distance:.0f} m | {s.risk_score:.1f} | {severity} |"
        )
    return lines


class MarkdownFormatter:
    """Format an :class:`~route_hazards.analysis.models.AnalysisResult` as Markdown.

    Args:
        max_rows: Hazard tables list at most this many rows, highest risk first.
    """

    def __init__(self, max_rows: int = 20) -> None:
        self.max_rows = max_rows

    def format(self, result: AnalysisResult) -> str:
        """Return the full Markdown report as a string."""
        s = result.summary
        lines: list[str] = [
            f"# Route Visibility Report: {result.route_name or result.route_id}",
            "",
            f"**Route**: {result.route_id}  ",
            f"**Analysed**: {result.analysis_date}  ",
            f"**Overall risk**: {s.overall_risk_level.value}",
            "",
        ]

        if not s.analysis_success:
            lines += ["> **Warning**: hazard detection partially failed.", ""]
            if result.sharp_turns.error:
                lines.append(f"> Sharp turns: {result.sharp_turns.error}")
            if result.blind_spots.error:
                lines.append(f"> Blind spots: {result.blind_spots.error}")
            lines.append("")

        lines += [
            "## Summary",
            "",
            f"- Sharp turns: {s.total_sharp_turns} ({s.critical_turns} critical), "
            f"average risk {s.avg_turn_risk:.2f}",
            f"- Blind spots: {s.total_blind_spots} ({s.critical_blind_spots} critical), "
            f"average risk {s.avg_blind_spot_risk:.2f}",
            "",
        ]

        if result.sharp_turns.turns:
            lines += ["## Sharp Turns", ""]
            lines += _turn_table(result, self.max_rows)
            lines.append("")

        if result.blind_spots.blind_spots:
            lines += ["## Blind Spots", ""]
            lines += _spot_table(result, self.max_rows)
            lines.append("")

        lines += ["## Recommendations", ""]
        for rec in result.recommendations:
            lines.append(f"### [{rec.priority}] {rec.title}")
            lines.append("")
            if rec.description:
                lines += [rec.description, ""]
            lines += [f"- {a}" for a in rec.actions]
            lines.append("")

        return "\n".join(lines)

    def write(self, result: AnalysisResult, path: str) -> None:
        """Write the formatted report to *path* (UTF-8)."""
        Path(path).write_text(self.format(result), encoding="utf-8")
