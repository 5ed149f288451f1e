"""
Pruning engine for SARB.

Removes from the latest analysis results every finding that corresponds
to a baselined finding, after projecting each baselined finding's
location forward through version control history.

Matching is count-based: N baseline findings sharing a key suppress at
most N current findings with that key.
"""

from __future__ import annotations

from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from sarb.baseline.snapshot import BaselineSnapshot
from sarb.core.config import MatchingConfig
from sarb.history.base import HistoryProvider, ProjectionOutcome
from sarb.models.base import Revision
from sarb.models.finding import AnalysisResults, AnalysisResultsBuilder, Finding
from sarb.pruning.keys import MatchingKey, finding_key
from sarb.pruning.results import PrunedResults
from sarb.utils.logging import ComponentLogger


class PruningEngine:
    """
    Matches current findings against a projected baseline.

    Example:
        engine = PruningEngine()
        pruned = engine.prune(baseline, current, history, WORKING_TREE)
    """

    def __init__(self, config: Optional[MatchingConfig] = None) -> None:
        """
        Initialize the pruning engine.

        Args:
            config: Matching configuration.
        """
        self.config = config or MatchingConfig()
        self.logger = ComponentLogger("pruning")

    def prune(
        self,
        baseline: BaselineSnapshot,
        current: AnalysisResults,
        history: HistoryProvider,
        current_revision: Revision,
    ) -> PrunedResults:
        """
        Remove baselined findings from the current results.

        Args:
            baseline: Baseline to prune with. Not modified.
            current: Latest analysis results. Not modified.
            history: Provider used to project baseline locations.
            current_revision: Revision the current results were produced at.

        Returns:
            PrunedResults holding the unmatched findings.

        Raises:
            HistoryUnavailable: If any projection fails. No partial result
                is produced.
        """
        remaining = self._build_projected_keys(baseline, history, current_revision)

        builder = AnalysisResultsBuilder()
        for finding in current:
            key = finding_key(finding, include_message=self.config.include_message)
            if remaining[key] > 0:
                remaining[key] -= 1
            else:
                builder.add(finding)

        pruned = PrunedResults(baseline=baseline, current=current, residual=builder.build())
        self.logger.info(
            "Pruned analysis results",
            total=pruned.total_count,
            matched=pruned.matched_count,
            residual=pruned.residual_count,
        )
        return pruned

    def _build_projected_keys(
        self,
        baseline: BaselineSnapshot,
        history: HistoryProvider,
        current_revision: Revision,
    ) -> Counter[MatchingKey]:
        """Project every baseline finding and count the resulting keys."""
        findings = list(baseline.results)
        outcomes = self._project_all(findings, baseline.revision, history, current_revision)

        keys: Counter[MatchingKey] = Counter()
        deleted = 0
        for finding, outcome in zip(findings, outcomes):
            if outcome.location is None:
                deleted += 1
                continue
            keys[finding_key(finding, outcome.location, self.config.include_message)] += 1

        self.logger.info(
            "Projected baseline",
            baseline=len(findings),
            projected=len(findings) - deleted,
            deleted=deleted,
            from_revision=baseline.revision.identifier,
            to_revision=current_revision.identifier,
        )
        return keys

    def _project_all(
        self,
        findings: list[Finding],
        from_revision: Revision,
        history: HistoryProvider,
        to_revision: Revision,
    ) -> list[ProjectionOutcome]:
        """Project finding locations, in parallel when configured."""

        def project(finding: Finding) -> ProjectionOutcome:
            outcome = history.project_location(finding.location, from_revision, to_revision)
            if not isinstance(outcome, ProjectionOutcome):
                raise TypeError(
                    f"History provider returned {type(outcome).__name__}, "
                    "expected a ProjectionOutcome"
                )
            return outcome

        workers = self.config.max_workers
        if workers <= 1 or len(findings) < 2:
            return [project(finding) for finding in findings]

        # map() re-raises the first failure when results are collected
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(project, findings))


def prune(
    baseline: BaselineSnapshot,
    current: AnalysisResults,
    history: HistoryProvider,
    current_revision: Revision,
    include_message: bool = False,
    max_workers: int = 1,
) -> PrunedResults:
    """Prune current results against a baseline with a one-off engine."""
    engine = PruningEngine(MatchingConfig(include_message=include_message, max_workers=max_workers))
    return engine.prune(baseline, current, history, current_revision)
