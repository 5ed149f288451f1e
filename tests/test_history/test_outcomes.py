"""Tests for projection outcomes and the history provider contract."""

from __future__ import annotations

import pytest

from sarb.core.errors import HistoryUnavailable
from sarb.history import default_history_registry
from sarb.history.base import (
    Deleted,
    HistoryProvider,
    Moved,
    Unchanged,
    outcome_for,
)
from sarb.history.git import GitHistoryProviderFactory
from sarb.models.base import Location


class TestOutcomeFor:
    """Test classification of projections."""

    def test_same_location_is_unchanged(self):
        """Should report an identical location as unchanged."""
        location = Location("a.py", 3)
        outcome = outcome_for(location, Location("a.py", 3))
        assert outcome == Unchanged(location)
        assert outcome.location == location
        assert not outcome.is_deleted

    def test_shifted_line_is_moved(self):
        """Should report a new line as moved."""
        outcome = outcome_for(Location("a.py", 3), Location("a.py", 5))
        assert isinstance(outcome, Moved)
        assert outcome.location == Location("a.py", 5)

    def test_renamed_file_is_moved(self):
        """Should report a new path as moved."""
        outcome = outcome_for(Location("a.py", 3), Location("b.py", 3))
        assert isinstance(outcome, Moved)

    def test_none_is_deleted(self):
        """Should report a vanished location as deleted."""
        outcome = outcome_for(Location("a.py", 3), None)
        assert isinstance(outcome, Deleted)
        assert outcome.location is None
        assert outcome.is_deleted


class TestHistoryProviderContract:
    """Test the provider base class."""

    def test_current_revision_unsupported_by_default(self):
        """Should refuse to report a revision unless implemented."""

        class ProjectionOnly(HistoryProvider):
            @property
            def identifier(self) -> str:
                return "projection-only"

            def project_location(self, location, from_revision, to_revision):
                return Unchanged(location)

        with pytest.raises(HistoryUnavailable, match="projection-only"):
            ProjectionOnly().current_revision()


class TestHistoryRegistry:
    """Test the default history provider registry."""

    def test_git_is_default(self):
        """Should register git first."""
        registry = default_history_registry()
        assert isinstance(registry.default, GitHistoryProviderFactory)
        assert registry.codes() == ["git"]
