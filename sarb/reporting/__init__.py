"""
Reporting module for rendering pruned results in various formats.

Provides reporters for:
- Table (Rich terminal output, the default)
- JSON (programmatic consumption)
- Text (one line per finding)
"""

from typing import Optional

from sarb.core.registry import Registry
from sarb.reporting.base import (
    BaseReporter,
    ReportConfig,
    ReportMetadata,
)
from sarb.reporting.json_reporter import JSONReporter
from sarb.reporting.table import TableReporter
from sarb.reporting.text import TextReporter


def default_reporter_registry(config: Optional[ReportConfig] = None) -> Registry[BaseReporter]:
    """Build a registry of the bundled reporters; the table reporter is the default."""
    return Registry(
        "output-format",
        [TableReporter(config), JSONReporter(config), TextReporter(config)],
    )


__all__ = [
    # Base
    "BaseReporter",
    "ReportConfig",
    "ReportMetadata",
    "default_reporter_registry",
    # Reporters
    "JSONReporter",
    "TableReporter",
    "TextReporter",
]
