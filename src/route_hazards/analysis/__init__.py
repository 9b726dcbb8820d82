"""Route visibility analysis: orchestration, blind-spot contract and results."""

from route_hazards.analysis.blind_spots import (
    BlindSpotAnalyzer,
    StoredBlindSpotAnalyzer,
    summarize_blind_spots,
)
from route_hazards.analysis.models import (
    AnalysisResult,
    AnalysisSummary,
    BlindSpotAnalysis,
    RiskLevel,
    TurnScanResult,
)
from route_hazards.analysis.service import RouteAnalysisService, overall_risk_level

__all__ = [
    "AnalysisResult",
    "AnalysisSummary",
    "BlindSpotAnalysis",
    "BlindSpotAnalyzer",
    "RiskLevel",
    "RouteAnalysisService",
    "StoredBlindSpotAnalyzer",
    "TurnScanResult",
    "overall_risk_level",
    "summarize_blind_spots",
]
