"""
Analysis result models.

These models represent:
- Finding: a single issue reported by a static analysis tool
- AnalysisResults: an immutable, ordered collection of findings
- AnalysisResultsBuilder: incremental construction of AnalysisResults
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Optional

from sarb.models.base import Location

Extra = tuple[tuple[str, Any], ...]


def _freeze_extra(extra: Any) -> Extra:
    """Convert a mapping or pair sequence into a tuple of pairs."""
    if not extra:
        return ()
    items = extra.items() if isinstance(extra, dict) else extra
    return tuple((str(key), value) for key, value in items)


@dataclass(frozen=True)
class Finding:
    """
    Single issue reported by a static analysis tool.

    Findings are matched against a baseline by their derived key
    (location + type), never by full equality.
    """

    location: Location
    type: str
    message: str = ""
    extra: Extra = field(default_factory=tuple)

    def __post_init__(self) -> None:
        """Validate the type and freeze extra metadata."""
        if not isinstance(self.type, str) or not self.type:
            raise ValueError("Finding type must be a non-empty string")
        object.__setattr__(self, "message", self.message or "")
        object.__setattr__(self, "extra", _freeze_extra(self.extra))

    @property
    def file_path(self) -> str:
        return self.location.file_path

    @property
    def line(self) -> int:
        return self.location.line

    def get_extra(self, key: str, default: Any = None) -> Any:
        """Get the first extra value stored under key."""
        for extra_key, value in self.extra:
            if extra_key == key:
                return value
        return default

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "file": self.location.file_path,
            "line": self.location.line,
            "type": self.type,
            "message": self.message,
            "extra": [[key, value] for key, value in self.extra],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Finding":
        """Deserialize from dictionary."""
        return cls(
            location=Location(file_path=data["file"], line=data["line"]),
            type=data["type"],
            message=data.get("message", ""),
            extra=_freeze_extra(data.get("extra")),
        )


# The canonical name used by analysis tool parsers
AnalysisResult = Finding


class AnalysisResults:
    """
    Immutable ordered collection of findings.

    Insertion order is preserved for reporting; it plays no part in
    matching.
    """

    __slots__ = ("_findings",)

    def __init__(self, findings: Iterable[Finding] = ()) -> None:
        self._findings: tuple[Finding, ...] = tuple(findings)

    @property
    def findings(self) -> tuple[Finding, ...]:
        return self._findings

    @property
    def count(self) -> int:
        """Get number of findings."""
        return len(self._findings)

    def is_empty(self) -> bool:
        return not self._findings

    def __len__(self) -> int:
        return len(self._findings)

    def __iter__(self) -> Iterator[Finding]:
        return iter(self._findings)

    def __getitem__(self, index: int) -> Finding:
        return self._findings[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AnalysisResults):
            return NotImplemented
        return self._findings == other._findings

    def __repr__(self) -> str:
        return f"AnalysisResults(count={len(self._findings)})"

    def to_list(self) -> list[dict[str, Any]]:
        """Serialize all findings to a list of dictionaries."""
        return [finding.to_dict() for finding in self._findings]

    @classmethod
    def from_list(cls, data: list[dict[str, Any]]) -> "AnalysisResults":
        """Deserialize from a list of dictionaries."""
        return cls(Finding.from_dict(item) for item in data)


class AnalysisResultsBuilder:
    """Accumulates findings one at a time and yields AnalysisResults."""

    def __init__(self) -> None:
        self._findings: list[Finding] = []

    def add(self, finding: Finding) -> "AnalysisResultsBuilder":
        """Add a finding; returns the builder for chaining."""
        self._findings.append(finding)
        return self

    def add_finding(
        self,
        file_path: str,
        line: int,
        type: str,
        message: str = "",
        extra: Optional[Any] = None,
    ) -> "AnalysisResultsBuilder":
        """Build a finding from its parts and add it."""
        return self.add(
            Finding(
                location=Location(file_path=file_path, line=line),
                type=type,
                message=message,
                extra=_freeze_extra(extra),
            )
        )

    def __len__(self) -> int:
        return len(self._findings)

    def build(self) -> AnalysisResults:
        """Snapshot the findings added so far."""
        return AnalysisResults(self._findings)
