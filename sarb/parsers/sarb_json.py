"""
Parser for the SARB JSON format.

A JSON list of findings, each an object with ``file``, ``line``, ``type``
and optional ``message`` and ``extra`` fields. Tools without a bundled
parser can be converted to this format.
"""

from __future__ import annotations

from typing import Any, Optional

from sarb.core.errors import ParseError
from sarb.models.base import Location, ProjectRoot
from sarb.models.finding import AnalysisResults, AnalysisResultsBuilder, Finding
from sarb.parsers.base import ResultsParser


class SarbJsonResultsParser(ResultsParser):
    """Parses the canonical SARB JSON findings list."""

    @property
    def identifier(self) -> str:
        return "sarb-json"

    @property
    def description(self) -> str:
        return "SARB JSON list of {file, line, type, message}"

    def parse(self, content: str, project_root: Optional[ProjectRoot] = None) -> AnalysisResults:
        """Parse a SARB JSON document."""
        data = self._load_json(content)
        if not isinstance(data, list):
            raise ParseError("Expected a JSON list of findings", parser=self.identifier)

        builder = AnalysisResultsBuilder()
        for index, item in enumerate(data):
            builder.add(self._parse_finding(item, index, project_root))
        return builder.build()

    def _parse_finding(
        self,
        item: Any,
        index: int,
        project_root: Optional[ProjectRoot],
    ) -> Finding:
        if not isinstance(item, dict):
            raise ParseError(f"Finding #{index} is not a JSON object", parser=self.identifier)

        try:
            file_path = item["file"]
            line = item["line"]
            issue_type = item["type"]
        except KeyError as e:
            raise ParseError(f"Finding #{index} is missing field {e}", parser=self.identifier) from e

        if not isinstance(issue_type, str) or not issue_type:
            raise ParseError(f"Finding #{index} has an invalid type", parser=self.identifier)

        extra = item.get("extra") or []
        if isinstance(extra, dict):
            extra = list(extra.items())
        if not isinstance(extra, list) or not all(
            isinstance(pair, (list, tuple)) and len(pair) == 2 for pair in extra
        ):
            raise ParseError(f"Finding #{index} has malformed extra fields", parser=self.identifier)

        return Finding(
            location=Location.from_reported_path(file_path, line, project_root),
            type=issue_type,
            message=str(item.get("message") or ""),
            extra=tuple((str(key), value) for key, value in extra),
        )
