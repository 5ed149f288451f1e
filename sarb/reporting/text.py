"""
Plain text reporter for SARB.

One line per new finding, ``path:line type message``, which editors and
CI log viewers can link to the source.
"""

from __future__ import annotations

from sarb.pruning.results import PrunedResults
from sarb.reporting.base import BaseReporter


class TextReporter(BaseReporter):
    """Line-oriented reporter."""

    @property
    def identifier(self) -> str:
        return "text"

    @property
    def file_extension(self) -> str:
        return ".txt"

    @property
    def is_machine_readable(self) -> bool:
        return True

    def generate(self, pruned_results: PrunedResults) -> str:
        lines = []
        for finding in self.filter_findings(pruned_results.residual.findings):
            line = f"{finding.location.to_uri()} {finding.type}"
            if finding.message:
                line = f"{line} {finding.message}"
            lines.append(line)
        return "".join(f"{line}\n" for line in lines)
