"""
Base Reporter for SARB.

Provides the abstract base class for all output formatters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from sarb import __version__
from sarb.models.finding import Finding
from sarb.pruning.results import PrunedResults


@dataclass
class ReportConfig:
    """Configuration for report generation."""

    max_findings: Optional[int] = None  # None = all findings
    output_path: Optional[Path] = None


@dataclass
class ReportMetadata:
    """Metadata for the report."""

    tool_name: str = "SARB"
    tool_version: str = __version__
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class BaseReporter(ABC):
    """
    Abstract base class for report generators.

    Subclasses implement specific output formats (table, JSON, text).
    """

    def __init__(
        self,
        config: Optional[ReportConfig] = None,
        metadata: Optional[ReportMetadata] = None,
    ) -> None:
        """
        Initialize the reporter.

        Args:
            config: Report configuration.
            metadata: Report metadata.
        """
        self.config = config or ReportConfig()
        self.metadata = metadata or ReportMetadata()

    @property
    @abstractmethod
    def identifier(self) -> str:
        """Get the format code (e.g., 'table', 'json')."""
        ...

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """Get the default file extension (e.g., '.txt', '.json')."""
        ...

    @property
    def is_machine_readable(self) -> bool:
        """Whether stdout must carry nothing but the report."""
        return False

    @abstractmethod
    def generate(self, pruned_results: PrunedResults) -> str:
        """
        Generate the report content.

        Args:
            pruned_results: The pruned results to report.

        Returns:
            The report as a string.
        """
        ...

    def write(self, pruned_results: PrunedResults, output_path: Optional[Path] = None) -> Path:
        """
        Generate and write the report to a file.

        Args:
            pruned_results: The pruned results to report.
            output_path: Output file path. If None, uses config or generates default.

        Returns:
            The path to the written file.
        """
        path = output_path or self.config.output_path
        if path is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            path = Path(f"sarb_report_{timestamp}{self.file_extension}")

        content = self.generate(pruned_results)
        path.write_text(content, encoding="utf-8")

        return path

    def filter_findings(self, findings: tuple[Finding, ...]) -> list[Finding]:
        """
        Limit findings based on configuration.

        Args:
            findings: Findings to filter.

        Returns:
            Filtered list of findings.
        """
        filtered = list(findings)
        if self.config.max_findings is not None:
            filtered = filtered[:self.config.max_findings]
        return filtered
