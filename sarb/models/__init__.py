"""Canonical result model shared by parsers, the pruning engine and reporters."""

from sarb.models.base import (
    WORKING_TREE,
    Location,
    ProjectRoot,
    Revision,
    normalize_path,
)
from sarb.models.finding import (
    AnalysisResult,
    AnalysisResults,
    AnalysisResultsBuilder,
    Finding,
)

__all__ = [
    # Base
    "Location",
    "ProjectRoot",
    "Revision",
    "WORKING_TREE",
    "normalize_path",
    # Findings
    "AnalysisResult",
    "AnalysisResults",
    "AnalysisResultsBuilder",
    "Finding",
]
