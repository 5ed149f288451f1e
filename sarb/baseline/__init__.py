"""
Baseline snapshots for SARB.

Stores accepted findings together with the revision they were captured
at, so later runs can report only new findings.
"""

from sarb.baseline.snapshot import SNAPSHOT_FORMAT_VERSION, BaselineSnapshot

__all__ = [
    "BaselineSnapshot",
    "SNAPSHOT_FORMAT_VERSION",
]
