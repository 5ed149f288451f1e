"""
Pruned result set.

Output of the pruning engine: the current findings that survived pruning
plus the counts used for reporting and exit codes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from sarb.baseline.snapshot import BaselineSnapshot
from sarb.models.finding import AnalysisResults


class PruneStatus(Enum):
    """Outcome of a successful prune."""

    CLEAN = "clean"
    NEW_ISSUES = "new_issues"


@dataclass(frozen=True)
class PrunedResults:
    """
    Current findings minus those matched by the baseline.

    Never mutated after construction.
    """

    baseline: BaselineSnapshot
    current: AnalysisResults
    residual: AnalysisResults

    def __post_init__(self) -> None:
        if len(self.residual) > len(self.current):
            raise ValueError("Residual findings cannot outnumber current findings")

    @property
    def total_count(self) -> int:
        """Number of findings in the latest analysis, before pruning."""
        return len(self.current)

    @property
    def baseline_count(self) -> int:
        return len(self.baseline.results)

    @property
    def residual_count(self) -> int:
        """Number of findings not matched by the baseline."""
        return len(self.residual)

    @property
    def matched_count(self) -> int:
        """Number of current findings suppressed by the baseline."""
        return len(self.current) - len(self.residual)

    @property
    def has_new_issues(self) -> bool:
        return len(self.residual) > 0

    @property
    def status(self) -> PruneStatus:
        return PruneStatus.NEW_ISSUES if self.has_new_issues else PruneStatus.CLEAN

    def summary(self) -> dict[str, Any]:
        """Counts for reporting."""
        return {
            "total": self.total_count,
            "baseline": self.baseline_count,
            "matched": self.matched_count,
            "residual": self.residual_count,
            "status": self.status.value,
        }
