"""
Parser for SARIF 2.1.0 output.

Reads ``runs[].results[]``, taking the rule id as the finding type and
the first physical location as its location.
"""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import unquote, urlparse

from sarb.core.errors import ParseError
from sarb.models.base import Location, ProjectRoot
from sarb.models.finding import AnalysisResults, AnalysisResultsBuilder, Finding
from sarb.parsers.base import ResultsParser


class SarifResultsParser(ResultsParser):
    """Parses SARIF logs produced by most modern analysis tools."""

    @property
    def identifier(self) -> str:
        return "sarif"

    @property
    def description(self) -> str:
        return "SARIF 2.1.0 log"

    def parse(self, content: str, project_root: Optional[ProjectRoot] = None) -> AnalysisResults:
        """Parse a SARIF log."""
        data = self._load_json(content)
        if not isinstance(data, dict) or not isinstance(data.get("runs"), list):
            raise ParseError("Expected a SARIF log with a 'runs' list", parser=self.identifier)

        builder = AnalysisResultsBuilder()
        for run_index, run in enumerate(data["runs"]):
            if not isinstance(run, dict):
                raise ParseError(f"Run #{run_index} is not a JSON object", parser=self.identifier)
            tool = self._object(run.get("tool"), "tool")
            tool_name = self._object(tool.get("driver"), "tool.driver").get("name")
            results = self._array(run.get("results"), f"Run #{run_index} results")
            for index, result in enumerate(results):
                if not isinstance(result, dict):
                    raise ParseError(f"Result #{index} is not a JSON object", parser=self.identifier)
                finding = self._parse_result(result, index, tool_name, project_root)
                if finding is not None:
                    builder.add(finding)
        return builder.build()

    def _parse_result(
        self,
        result: dict[str, Any],
        index: int,
        tool_name: Optional[str],
        project_root: Optional[ProjectRoot],
    ) -> Optional[Finding]:
        """Convert one SARIF result; results without a file location are skipped."""
        rule = self._object(result.get("rule"), f"Result #{index} rule")
        rule_id = result.get("ruleId") or rule.get("id")
        if not rule_id:
            raise ParseError(f"Result #{index} has no ruleId", parser=self.identifier)

        physical = self._first_physical_location(result, index)
        if physical is None:
            return None

        artifact = self._object(
            physical.get("artifactLocation"), f"Result #{index} artifactLocation"
        )
        uri = artifact.get("uri")
        if not uri:
            return None
        if not isinstance(uri, str):
            raise ParseError(f"Result #{index} has a non-string uri", parser=self.identifier)

        region = self._object(physical.get("region"), f"Result #{index} region")
        line = region.get("startLine", 1)

        message = self._object(result.get("message"), f"Result #{index} message")

        extra: list[tuple[str, Any]] = []
        if result.get("level"):
            extra.append(("level", result["level"]))
        if tool_name:
            extra.append(("tool", tool_name))

        return Finding(
            location=Location.from_reported_path(self._uri_to_path(uri), line, project_root),
            type=str(rule_id),
            message=message.get("text", ""),
            extra=tuple(extra),
        )

    def _first_physical_location(
        self, result: dict[str, Any], index: int
    ) -> Optional[dict[str, Any]]:
        for location in self._array(result.get("locations"), f"Result #{index} locations"):
            location = self._object(location, f"Result #{index} location")
            physical = self._object(
                location.get("physicalLocation"), f"Result #{index} physicalLocation"
            )
            if physical:
                return physical
        return None

    def _object(self, value: Any, what: str) -> dict[str, Any]:
        """Return a JSON object, treating an absent value as empty."""
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ParseError(f"{what} is not a JSON object", parser=self.identifier)
        return value

    def _array(self, value: Any, what: str) -> list[Any]:
        """Return a JSON array, treating an absent value as empty."""
        if value is None:
            return []
        if not isinstance(value, list):
            raise ParseError(f"{what} is not a JSON array", parser=self.identifier)
        return value

    @staticmethod
    def _uri_to_path(uri: str) -> str:
        """Convert a SARIF artifact URI to a file path."""
        parsed = urlparse(uri)
        if parsed.scheme == "file":
            return unquote(parsed.path)
        if parsed.scheme and len(parsed.scheme) > 1:
            raise ParseError(f"Unsupported artifact URI scheme: {uri}", parser="sarif")
        return unquote(uri)
