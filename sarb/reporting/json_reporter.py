"""
JSON Reporter for SARB.

Generates structured JSON output for programmatic consumption.
"""

from __future__ import annotations

import json
from typing import Any

from sarb.pruning.results import PrunedResults
from sarb.reporting.base import BaseReporter


class JSONReporter(BaseReporter):
    """
    JSON format reporter.

    Produces the pruning summary and the new findings for integration
    with other tools.
    """

    @property
    def identifier(self) -> str:
        return "json"

    @property
    def file_extension(self) -> str:
        return ".json"

    @property
    def is_machine_readable(self) -> bool:
        return True

    def generate(self, pruned_results: PrunedResults) -> str:
        """Generate JSON report."""
        findings = self.filter_findings(pruned_results.residual.findings)

        report = {
            "metadata": self._create_metadata(pruned_results),
            "summary": pruned_results.summary(),
            "findings": [finding.to_dict() for finding in findings],
        }

        return json.dumps(report, indent=2, default=str) + "\n"

    def _create_metadata(self, pruned_results: PrunedResults) -> dict[str, Any]:
        """Create metadata section."""
        baseline = pruned_results.baseline
        return {
            "tool": {
                "name": self.metadata.tool_name,
                "version": self.metadata.tool_version,
            },
            "baseline": {
                "revision": baseline.revision.identifier,
                "results_parser": baseline.parser_identifier,
                "history_provider": baseline.history_provider,
            },
            "generated_at": self.metadata.generated_at.isoformat(),
        }
