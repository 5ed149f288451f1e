"""Core module containing configuration, errors, registries and orchestration."""

from sarb.core.config import SarbConfig
from sarb.core.errors import (
    BaselineFileError,
    HistoryUnavailable,
    InvalidChoiceError,
    InvalidLocation,
    ParseError,
    SarbError,
)
from sarb.core.registry import Registry

__all__ = [
    "SarbConfig",
    "Registry",
    # Errors
    "SarbError",
    "HistoryUnavailable",
    "InvalidLocation",
    "InvalidChoiceError",
    "BaselineFileError",
    "ParseError",
]
