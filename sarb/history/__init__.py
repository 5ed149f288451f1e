"""
Version control history providers.

Provides:
- HistoryProvider: the location projection contract
- GitHistoryProvider: projection via ``git diff`` hunks
- Unified diff parsing and line projection helpers
"""

from sarb.core.registry import Registry
from sarb.history.base import (
    Deleted,
    HistoryProvider,
    HistoryProviderFactory,
    Moved,
    ProjectionOutcome,
    Unchanged,
    outcome_for,
)
from sarb.history.diff import DiffSet, FileDiff, Hunk, parse_unified_diff
from sarb.history.git import GitHistoryProvider, GitHistoryProviderFactory


def default_history_registry() -> Registry[HistoryProviderFactory]:
    """Build a registry of the bundled history provider factories."""
    return Registry("history-provider", [GitHistoryProviderFactory()])


__all__ = [
    # Contract
    "HistoryProvider",
    "HistoryProviderFactory",
    "ProjectionOutcome",
    "Unchanged",
    "Moved",
    "Deleted",
    "outcome_for",
    # Diffs
    "DiffSet",
    "FileDiff",
    "Hunk",
    "parse_unified_diff",
    # Git
    "GitHistoryProvider",
    "GitHistoryProviderFactory",
    "default_history_registry",
]
