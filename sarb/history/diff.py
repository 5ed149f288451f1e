"""
Unified diff parsing and hunk-based line projection.

Parses ``git diff`` output into FileDiff objects and maps line numbers in
the old version of a file onto the new version:

- lines before a hunk shift by the net size change of the hunks above
- lines inside a hunk follow their context line, or vanish if removed
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from sarb.models.base import Location, normalize_path

CONTEXT = " "
REMOVED = "-"
ADDED = "+"

DEV_NULL = "/dev/null"

_HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")

_ESCAPES = {
    "a": "\a", "b": "\b", "f": "\f", "n": "\n", "r": "\r",
    "t": "\t", "v": "\v", "\\": "\\", '"': '"',
}


class DiffParseError(ValueError):
    """Raised when diff output does not follow the unified diff format."""


@dataclass(frozen=True)
class Hunk:
    """
    Single hunk of a unified diff.

    ``changes`` holds one marker per hunk body line: CONTEXT, REMOVED or
    ADDED.
    """

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    changes: tuple[str, ...] = ()

    @property
    def first_old_line(self) -> int:
        # A pure insertion reports the line *before* the insertion point
        return self.old_start if self.old_count else self.old_start + 1

    @property
    def last_old_line(self) -> int:
        return self.first_old_line + self.old_count - 1

    @property
    def offset(self) -> int:
        """Net number of lines this hunk adds."""
        return self.new_count - self.old_count

    def project_line(self, line: int) -> Optional[int]:
        """Map an old line inside this hunk to its new line, or None if removed."""
        old_line = self.old_start
        new_line = self.new_start
        for change in self.changes:
            if change == CONTEXT:
                if old_line == line:
                    return new_line
                old_line += 1
                new_line += 1
            elif change == REMOVED:
                if old_line == line:
                    return None
                old_line += 1
            else:
                new_line += 1
        return None


@dataclass(frozen=True)
class FileDiff:
    """
    Changes made to one file.

    ``old_path`` is None for added files, ``new_path`` None for deleted ones.
    """

    old_path: Optional[str]
    new_path: Optional[str]
    hunks: tuple[Hunk, ...] = ()
    is_binary: bool = False

    @property
    def is_added(self) -> bool:
        return self.old_path is None

    @property
    def is_deleted(self) -> bool:
        return self.new_path is None

    @property
    def is_renamed(self) -> bool:
        return (
            self.old_path is not None
            and self.new_path is not None
            and self.old_path != self.new_path
        )

    def project_line(self, line: int) -> Optional[int]:
        """
        Map a line of the old file onto the new file.

        Returns:
            The new line number, or None if the line (or file) was removed.
        """
        if self.is_deleted:
            return None

        offset = 0
        for hunk in self.hunks:
            if line < hunk.first_old_line:
                break
            if line <= hunk.last_old_line:
                return hunk.project_line(line)
            offset += hunk.offset
        return line + offset


@dataclass
class DiffSet:
    """All file changes between two revisions, indexed by old path."""

    files: list[FileDiff] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._by_old_path: dict[str, FileDiff] = {
            fd.old_path: fd for fd in self.files if fd.old_path is not None
        }

    def get(self, path: str) -> Optional[FileDiff]:
        """Get the diff for a file by its old path."""
        return self._by_old_path.get(path)

    def project(self, location: Location) -> Optional[Location]:
        """
        Project a location through this set of changes.

        Returns:
            The new location, or None if the line or file was removed.
        """
        file_diff = self._by_old_path.get(location.file_path)
        if file_diff is None:
            return location
        new_line = file_diff.project_line(location.line)
        if new_line is None or file_diff.new_path is None:
            return None
        return Location(file_diff.new_path, new_line)

    def __len__(self) -> int:
        return len(self.files)


def unquote_path(path: str) -> str:
    """Decode a C-style quoted path as emitted by git."""
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path

    body = path[1:-1]
    raw = bytearray()
    i = 0
    while i < len(body):
        char = body[i]
        if char != "\\":
            raw.extend(char.encode("utf-8"))
            i += 1
            continue
        nxt = body[i + 1] if i + 1 < len(body) else ""
        if nxt in _ESCAPES:
            raw.extend(_ESCAPES[nxt].encode("utf-8"))
            i += 2
        elif re.match(r"[0-7]{3}", body[i + 1:i + 4]):
            raw.append(int(body[i + 1:i + 4], 8))
            i += 4
        else:
            raw.extend(b"\\")
            i += 1
    return raw.decode("utf-8", errors="replace")


def _strip_prefix(path: str, prefix: str) -> Optional[str]:
    """Decode a diff path, drop its a/ or b/ prefix; None for /dev/null."""
    if not path.startswith('"'):
        # git appends a tab to ---/+++ paths containing spaces
        path = path.split("\t")[0]
    path = unquote_path(path)
    if path == DEV_NULL:
        return None
    if path.startswith(prefix):
        path = path[len(prefix):]
    return normalize_path(path)


def _paths_from_git_header(header: str) -> tuple[Optional[str], Optional[str]]:
    """Recover old/new paths from a ``diff --git a/X b/Y`` line."""
    rest = header[len("diff --git "):]
    if rest.startswith('"'):
        end = rest.index('"', 1)
        while rest[end - 1] == "\\":
            end = rest.index('"', end + 1)
        old, new = rest[:end + 1], rest[end + 2:]
        return _strip_prefix(old, "a/"), _strip_prefix(new, "b/")

    # Unrenamed files repeat the same path: "a/P b/P"
    if (len(rest) - 5) % 2 == 0:
        size = (len(rest) - 5) // 2
        old, new = rest[:size + 2], rest[size + 3:]
        if old[2:] == new[2:]:
            return _strip_prefix(old, "a/"), _strip_prefix(new, "b/")

    old, sep, new = rest.partition(" b/")
    if not sep:
        raise DiffParseError(f"Cannot read paths from diff header: {header}")
    return _strip_prefix(old, "a/"), _strip_prefix("b/" + new, "b/")


class _FileDiffBuilder:
    def __init__(self, header: str) -> None:
        self.old_path, self.new_path = _paths_from_git_header(header)
        self.hunks: list[Hunk] = []
        self.is_binary = False
        self.added = False
        self.deleted = False

    def build(self) -> FileDiff:
        return FileDiff(
            old_path=None if self.added else self.old_path,
            new_path=None if self.deleted else self.new_path,
            hunks=tuple(self.hunks),
            is_binary=self.is_binary,
        )


def parse_unified_diff(text: str) -> DiffSet:
    """
    Parse ``git diff`` output.

    Args:
        text: Output of ``git diff`` with default a/ and b/ prefixes.

    Returns:
        DiffSet covering every file in the output.

    Raises:
        DiffParseError: If a hunk is truncated or a header is unreadable.
    """
    # Only "\n" ends a diff line; source lines may hold \r, \f or other
    # characters that str.splitlines() would also break on.
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    files: list[FileDiff] = []
    current: Optional[_FileDiffBuilder] = None
    i = 0

    while i < len(lines):
        line = lines[i].removesuffix("\r")

        if line.startswith("diff --git "):
            if current is not None:
                files.append(current.build())
            current = _FileDiffBuilder(line)
            i += 1
            continue

        if current is None:
            i += 1
            continue

        if line.startswith("@@"):
            hunk, i = _parse_hunk(lines, i)
            current.hunks.append(hunk)
            continue

        if line.startswith("new file mode"):
            current.added = True
        elif line.startswith("deleted file mode"):
            current.deleted = True
        elif line.startswith("rename from "):
            current.old_path = normalize_path(unquote_path(line[len("rename from "):]))
        elif line.startswith("rename to "):
            current.new_path = normalize_path(unquote_path(line[len("rename to "):]))
        elif line.startswith("--- "):
            path = _strip_prefix(line[4:], "a/")
            if path is None:
                current.added = True
            else:
                current.old_path = path
        elif line.startswith("+++ "):
            path = _strip_prefix(line[4:], "b/")
            if path is None:
                current.deleted = True
            else:
                current.new_path = path
        elif line.startswith("Binary files ") or line == "GIT binary patch":
            current.is_binary = True
        i += 1

    if current is not None:
        files.append(current.build())

    return DiffSet(files)


def _parse_hunk(lines: list[str], index: int) -> tuple[Hunk, int]:
    """Parse the hunk starting at lines[index]; return it and the next index."""
    header = lines[index]
    match = _HUNK_HEADER.match(header)
    if not match:
        raise DiffParseError(f"Malformed hunk header: {header}")

    old_start = int(match.group(1))
    old_count = int(match.group(2)) if match.group(2) is not None else 1
    new_start = int(match.group(3))
    new_count = int(match.group(4)) if match.group(4) is not None else 1

    changes: list[str] = []
    old_remaining, new_remaining = old_count, new_count
    i = index + 1
    while old_remaining > 0 or new_remaining > 0:
        if i >= len(lines):
            raise DiffParseError(f"Truncated hunk: {header}")
        body = lines[i]
        i += 1
        if body.startswith("\\"):
            # "\ No newline at end of file"
            continue
        # An empty context line, possibly CRLF terminated.
        marker = body[:1] if body not in ("", "\r") else CONTEXT
        if marker == CONTEXT:
            old_remaining -= 1
            new_remaining -= 1
        elif marker == REMOVED:
            old_remaining -= 1
        elif marker == ADDED:
            new_remaining -= 1
        else:
            raise DiffParseError(f"Unexpected line in hunk {header}: {body!r}")
        changes.append(marker)

    while i < len(lines) and lines[i].startswith("\\"):
        i += 1

    return Hunk(old_start, old_count, new_start, new_count, tuple(changes)), i


def compose(diff_sets: Iterable[DiffSet], location: Location) -> Optional[Location]:
    """Project a location through successive diffs, oldest first."""
    current: Optional[Location] = location
    for diff_set in diff_sets:
        if current is None:
            return None
        current = diff_set.project(current)
    return current
