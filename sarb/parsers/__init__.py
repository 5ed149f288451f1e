"""
Parsers converting static analysis tool output into AnalysisResults.

Provides parsers for:
- SARB JSON (canonical list format)
- SARIF 2.1.0
"""

from sarb.core.registry import Registry
from sarb.parsers.base import ResultsParser
from sarb.parsers.sarb_json import SarbJsonResultsParser
from sarb.parsers.sarif import SarifResultsParser


def default_parser_registry() -> Registry[ResultsParser]:
    """Build a registry of the bundled parsers."""
    return Registry("input-format", [SarbJsonResultsParser(), SarifResultsParser()])


__all__ = [
    "ResultsParser",
    "SarbJsonResultsParser",
    "SarifResultsParser",
    "default_parser_registry",
]
