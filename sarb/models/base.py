"""
Core value types used throughout SARB.

This module defines:
- Location: a normalised, project-relative file path plus a 1-based line
- ProjectRoot: conversion between tool-reported paths and project paths
- Revision: an opaque version-control revision identifier
"""

from __future__ import annotations

import os
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from sarb.core.errors import InvalidLocation

PathLike = Union[str, Path]


def normalize_path(path: PathLike) -> str:
    """
    Normalise a file path for comparison.

    Separators are converted to "/", "." segments dropped and ".."
    segments resolved lexically. Paths that are empty or climb above
    their starting point are rejected.

    Args:
        path: Path to normalise.

    Returns:
        The normalised path string.

    Raises:
        InvalidLocation: If the path is empty or escapes its root.
    """
    raw = str(path).strip() if path is not None else ""
    if not raw:
        raise InvalidLocation("File path must not be empty", path=str(path))

    normalized = posixpath.normpath(raw.replace("\\", "/"))
    if normalized == ".":
        raise InvalidLocation("File path does not name a file", path=raw)
    if normalized == ".." or normalized.startswith("../"):
        raise InvalidLocation("File path escapes the project root", path=raw)
    # posixpath keeps a leading "//" as-is
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


@dataclass(frozen=True)
class Location:
    """
    Location of a finding in the project.

    Two locations are equal only when their normalised paths and line
    numbers are identical.
    """

    file_path: str
    line: int

    def __post_init__(self) -> None:
        """Normalise the path and validate the line number."""
        object.__setattr__(self, "file_path", normalize_path(self.file_path))
        if isinstance(self.line, bool) or not isinstance(self.line, int):
            raise InvalidLocation(
                f"Line number must be an integer, got {self.line!r}",
                path=self.file_path,
            )
        if self.line < 1:
            raise InvalidLocation(
                f"Line number must be >= 1, got {self.line}",
                path=self.file_path,
            )

    @classmethod
    def from_reported_path(
        cls,
        path: PathLike,
        line: int,
        project_root: Optional["ProjectRoot"] = None,
    ) -> "Location":
        """
        Build a location from a path as reported by an analysis tool.

        Absolute paths are made relative to the project root when one is given.
        """
        if project_root is not None:
            path = project_root.relative_path(path)
        return cls(file_path=str(path), line=line)

    def with_line(self, line: int) -> "Location":
        """Return a copy of this location at another line."""
        return Location(self.file_path, line)

    def to_uri(self) -> str:
        """
        Convert to URI string format.

        Returns:
            String in format "file:line"
        """
        return f"{self.file_path}:{self.line}"

    def __str__(self) -> str:
        return self.to_uri()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"file": self.file_path, "line": self.line}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Location":
        """Deserialize from dictionary."""
        return cls(file_path=data["file"], line=data["line"])


@dataclass(frozen=True)
class ProjectRoot:
    """
    Root directory of the analysed project.

    Analysis tools report either absolute paths or paths relative to the
    project root, as SARIF artifact URIs are. Findings always store the
    project-relative form.
    """

    root: Path

    @classmethod
    def from_project_root(
        cls,
        root: PathLike,
        cwd: Optional[PathLike] = None,
    ) -> "ProjectRoot":
        """Create a project root, resolving a relative root against cwd."""
        cwd_path = Path(cwd) if cwd is not None else Path.cwd()
        root_path = Path(root)
        if not root_path.is_absolute():
            root_path = cwd_path / root_path
        return cls(root=Path(os.path.normpath(root_path)))

    @classmethod
    def from_current_working_directory(cls, cwd: Optional[PathLike] = None) -> "ProjectRoot":
        """Create a project root that is the current working directory."""
        cwd_path = Path(cwd) if cwd is not None else Path.cwd()
        return cls.from_project_root(cwd_path, cwd_path)

    def relative_path(self, path: PathLike) -> str:
        """
        Convert a reported path into a project-relative path.

        Relative paths are taken to be project-relative already.

        Raises:
            InvalidLocation: If an absolute path lies outside the project root.
        """
        candidate = Path(path)
        if not candidate.is_absolute():
            return normalize_path(path)

        candidate = Path(os.path.normpath(candidate))
        try:
            relative = candidate.relative_to(self.root)
        except ValueError:
            raise InvalidLocation(
                f"File is not within project root [{self.root}]",
                path=str(path),
            ) from None
        return normalize_path(relative.as_posix())

    def absolute_path(self, relative: str) -> Path:
        """Convert a project-relative path to an absolute path."""
        return self.root / normalize_path(relative)

    def __str__(self) -> str:
        return str(self.root)


@dataclass(frozen=True)
class Revision:
    """
    Opaque identifier of a point in the project's history.

    Revisions carry no ordering; only a history provider can relate two
    of them.
    """

    identifier: str

    def __post_init__(self) -> None:
        """Validate the identifier."""
        if not isinstance(self.identifier, str) or not self.identifier.strip():
            raise ValueError("Revision identifier must be a non-empty string")
        object.__setattr__(self, "identifier", self.identifier.strip())

    @property
    def is_working_tree(self) -> bool:
        """Check if this revision denotes the uncommitted working tree."""
        return self.identifier == _WORKING_TREE_ID

    def __str__(self) -> str:
        return self.identifier


_WORKING_TREE_ID = "WORKING_TREE"

# Uncommitted state of the project on disk
WORKING_TREE = Revision(_WORKING_TREE_ID)
