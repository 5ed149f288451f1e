"""
Baseline pruning: matching keys, the pruning engine and its results.
"""

from sarb.pruning.engine import PruningEngine, prune
from sarb.pruning.keys import MatchingKey, finding_key, matching_key
from sarb.pruning.results import PrunedResults, PruneStatus

__all__ = [
    "PruningEngine",
    "prune",
    "MatchingKey",
    "matching_key",
    "finding_key",
    "PrunedResults",
    "PruneStatus",
]
