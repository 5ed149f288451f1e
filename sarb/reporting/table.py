"""
Table Reporter for SARB.

Renders findings introduced since the baseline as a Rich table.
"""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from sarb.pruning.results import PrunedResults
from sarb.reporting.base import BaseReporter, ReportConfig, ReportMetadata


class TableReporter(BaseReporter):
    """
    Table format reporter.

    Produces a terminal table with one row per new finding.
    """

    def __init__(
        self,
        config: Optional[ReportConfig] = None,
        metadata: Optional[ReportMetadata] = None,
        console: Optional[Console] = None,
    ) -> None:
        super().__init__(config, metadata)
        self.console = console or Console(width=160)

    @property
    def identifier(self) -> str:
        return "table"

    @property
    def file_extension(self) -> str:
        return ".txt"

    def generate(self, pruned_results: PrunedResults) -> str:
        """Generate the table as plain text."""
        with self.console.capture() as capture:
            self.display(pruned_results)
        return capture.get()

    def display(self, pruned_results: PrunedResults) -> None:
        """Display the report to the console."""
        findings = self.filter_findings(pruned_results.residual.findings)

        if not findings:
            self.console.print("No new issues since baseline.", highlight=False)
            return

        table = Table(title=f"New issues since baseline: {pruned_results.residual_count}")
        table.add_column("File", style="cyan", overflow="fold")
        table.add_column("Line", justify="right")
        table.add_column("Type", style="yellow")
        table.add_column("Message", overflow="fold")

        for finding in findings:
            table.add_row(
                Text(finding.file_path),
                str(finding.line),
                Text(finding.type),
                Text(finding.message),
            )

        self.console.print(table)

        hidden = pruned_results.residual_count - len(findings)
        if hidden > 0:
            self.console.print(f"... and {hidden} more", highlight=False)
