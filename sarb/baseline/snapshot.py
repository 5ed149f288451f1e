"""
Baseline snapshot for SARB.

A baseline is the set of findings a team has accepted, anchored to the
revision they were captured at.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sarb.core.errors import BaselineFileError, InvalidLocation
from sarb.models.base import Revision
from sarb.models.finding import AnalysisResults

SNAPSHOT_FORMAT_VERSION = "1.0"


@dataclass(frozen=True)
class BaselineSnapshot:
    """
    Findings captured at a specific revision.

    Read-only once created; equality is by value.
    """

    revision: Revision
    results: AnalysisResults
    parser_identifier: str
    history_provider: str = "git"

    @property
    def count(self) -> int:
        """Get number of baselined findings."""
        return len(self.results)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "sarb_version": SNAPSHOT_FORMAT_VERSION,
            "history_provider": self.history_provider,
            "history_marker": self.revision.identifier,
            "results_parser": self.parser_identifier,
            "results": self.results.to_list(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BaselineSnapshot":
        """Deserialize from dictionary."""
        return cls(
            revision=Revision(data["history_marker"]),
            results=AnalysisResults.from_list(data.get("results", [])),
            parser_identifier=data["results_parser"],
            history_provider=data.get("history_provider", "git"),
        )

    def save(self, path: Path) -> None:
        """Save baseline to file."""
        try:
            path.write_text(json.dumps(self.to_dict(), indent=2) + "\n", encoding="utf-8")
        except OSError as e:
            raise BaselineFileError(f"Cannot write baseline: {e.strerror or e}", path) from e

    @classmethod
    def load(cls, path: Path) -> "BaselineSnapshot":
        """
        Load baseline from file.

        Raises:
            BaselineFileError: If the file is missing, unreadable or malformed.
        """
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise BaselineFileError(f"Cannot read baseline: {e.strerror or e}", path) from e
        except UnicodeDecodeError as e:
            raise BaselineFileError(f"Baseline is not valid UTF-8: {e}", path) from e

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise BaselineFileError(f"Baseline is not valid JSON: {e}", path) from e

        if not isinstance(data, dict):
            raise BaselineFileError("Baseline must be a JSON object", path)

        try:
            return cls.from_dict(data)
        except KeyError as e:
            raise BaselineFileError(f"Baseline is missing field {e}", path) from e
        except (TypeError, ValueError, InvalidLocation) as e:
            raise BaselineFileError(f"Baseline contains invalid data: {e}", path) from e
