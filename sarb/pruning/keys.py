"""
Matching key derivation.

The key decides whether a current finding is "the same issue" as a
projected baseline finding. Baseline and current findings must go through
the same function.
"""

from __future__ import annotations

from typing import NamedTuple, Optional

from sarb.models.base import Location
from sarb.models.finding import Finding


class MatchingKey(NamedTuple):
    """Identity of a finding for matching purposes."""

    file_path: str
    line: int
    type: str
    message: Optional[str] = None


def matching_key(location: Location, type: str, message: Optional[str] = None) -> MatchingKey:
    """
    Derive the matching key for a location and issue type.

    Location paths are normalised when the Location is built, so equal
    keys mean identical normalised path and line.

    Args:
        location: Where the issue is.
        type: Rule or category identifier.
        message: Included only when strict matching is enabled.
    """
    return MatchingKey(location.file_path, location.line, type, message)


def finding_key(
    finding: Finding,
    location: Optional[Location] = None,
    include_message: bool = False,
) -> MatchingKey:
    """
    Derive the matching key for a finding.

    Args:
        finding: The finding.
        location: Overrides the finding's own location (used for projected
            baseline findings).
        include_message: Make the message part of the key.
    """
    return matching_key(
        location if location is not None else finding.location,
        finding.type,
        finding.message if include_message else None,
    )
