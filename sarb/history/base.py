"""
History provider contract.

A history provider answers a single question: where does a location at
one revision live at another revision? The pruning engine relies on this
query alone and never sees diffs or commits.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from sarb.core.errors import HistoryUnavailable
from sarb.models.base import Location, ProjectRoot, Revision

if TYPE_CHECKING:
    from sarb.core.config import HistoryConfig


@dataclass(frozen=True)
class ProjectionOutcome:
    """Result of projecting a location from one revision to another."""

    @property
    def location(self) -> Optional[Location]:
        """Projected location, or None when the location no longer exists."""
        return None

    @property
    def is_deleted(self) -> bool:
        return self.location is None


@dataclass(frozen=True)
class Unchanged(ProjectionOutcome):
    """The location passes through identically."""

    projected: Location

    @property
    def location(self) -> Optional[Location]:
        return self.projected


@dataclass(frozen=True)
class Moved(ProjectionOutcome):
    """The file was renamed and/or the line shifted."""

    projected: Location

    @property
    def location(self) -> Optional[Location]:
        return self.projected


@dataclass(frozen=True)
class Deleted(ProjectionOutcome):
    """The file or the line itself no longer exists."""


def outcome_for(original: Location, projected: Optional[Location]) -> ProjectionOutcome:
    """
    Classify a projection result.

    Args:
        original: Location at the source revision.
        projected: Location at the target revision, or None if removed.

    Returns:
        Deleted, Unchanged or Moved.
    """
    if projected is None:
        return Deleted()
    if projected == original:
        return Unchanged(projected)
    return Moved(projected)


class HistoryProvider(ABC):
    """
    Abstract base class for version control history providers.

    Implementations must be safe to query repeatedly; queries are
    read-only and independent of each other.
    """

    @property
    @abstractmethod
    def identifier(self) -> str:
        """Get the provider code stored in baseline files (e.g., 'git')."""
        ...

    @abstractmethod
    def project_location(
        self,
        location: Location,
        from_revision: Revision,
        to_revision: Revision,
    ) -> ProjectionOutcome:
        """
        Project a location from one revision to another.

        Args:
            location: Location at from_revision.
            from_revision: Revision the location was recorded at.
            to_revision: Revision to project to.

        Returns:
            Unchanged, Moved or Deleted.

        Raises:
            HistoryUnavailable: If revision data cannot be retrieved.
        """
        ...

    def current_revision(self) -> Revision:
        """
        Get the revision the project is currently at.

        Used when recording a new baseline.
        """
        raise HistoryUnavailable(f"History provider '{self.identifier}' cannot report the current revision")


class HistoryProviderFactory(ABC):
    """Creates history providers bound to a project."""

    @property
    @abstractmethod
    def identifier(self) -> str:
        """Get the provider code this factory creates."""
        ...

    @abstractmethod
    def create(
        self,
        project_root: ProjectRoot,
        config: Optional["HistoryConfig"] = None,
    ) -> HistoryProvider:
        """Create a provider for the project at project_root."""
        ...
