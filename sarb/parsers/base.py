"""
Base results parser for SARB.

Provides the abstract base class for converting static analysis tool
output into AnalysisResults.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, Optional

from sarb.core.errors import ParseError
from sarb.models.base import ProjectRoot
from sarb.models.finding import AnalysisResults


class ResultsParser(ABC):
    """
    Abstract base class for analysis output parsers.

    Subclasses implement a specific tool output format.
    """

    @property
    @abstractmethod
    def identifier(self) -> str:
        """Get the parser code (e.g., 'sarb-json', 'sarif')."""
        ...

    @property
    def description(self) -> str:
        """Get a one-line description for listings."""
        return self.identifier

    @abstractmethod
    def parse(self, content: str, project_root: Optional[ProjectRoot] = None) -> AnalysisResults:
        """
        Parse analysis tool output.

        Args:
            content: Raw tool output.
            project_root: Used to relativise absolute file paths.

        Returns:
            The parsed findings.

        Raises:
            ParseError: If the content is not in this parser's format.
            InvalidLocation: If a finding has an unusable path or line.
        """
        ...

    def _load_json(self, content: str) -> Any:
        """Decode JSON content, raising ParseError on failure."""
        if not content.strip():
            raise ParseError("No analysis output to parse", parser=self.identifier)
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON: {e}", parser=self.identifier) from e
