"""
Exception hierarchy for SARB.

All errors raised deliberately by SARB derive from SarbError so the CLI
can map them to exit codes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence


class SarbError(Exception):
    """Base exception for SARB errors."""

    pass


class InvalidLocation(SarbError, ValueError):
    """Raised when a file path or line number cannot form a valid location."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        self.path = path
        if path is not None:
            message = f"{message}\nPath: {path}"
        super().__init__(message)


class HistoryUnavailable(SarbError):
    """Raised when the history provider cannot answer a projection query."""

    def __init__(self, message: str, revision: Optional[str] = None) -> None:
        self.revision = revision
        if revision:
            message = f"{message}\nRevision: {revision}"
        super().__init__(message)


class InvalidChoiceError(SarbError, ValueError):
    """Raised when a registry code does not name a registered implementation."""

    def __init__(self, value: str, option: str, choices: Sequence[str]) -> None:
        self.value = value
        self.option = option
        self.choices = list(choices)
        super().__init__(
            f"Invalid value [{value}] for option [{option}]. "
            f"Pick one of: {'|'.join(self.choices)}"
        )


class BaselineFileError(SarbError):
    """Raised when a baseline file cannot be read, decoded or written."""

    def __init__(self, message: str, path: Optional[Path] = None) -> None:
        self.path = path
        if path is not None:
            message = f"{message}\nBaseline file: {path}"
        super().__init__(message)


class ParseError(SarbError):
    """Raised when static analysis output cannot be parsed."""

    def __init__(self, message: str, parser: Optional[str] = None) -> None:
        self.parser = parser
        if parser:
            message = f"[{parser}] {message}"
        super().__init__(message)
