"""
Git-backed history provider.

Projects locations by parsing ``git diff`` between the baseline commit and
the target revision (by default the working tree). With ``walk_commits``
enabled, each commit in between is diffed against its predecessor and the
projections are composed, which follows renames that a single end-to-end
diff may not pair up.
"""

from __future__ import annotations

import subprocess
import threading
from pathlib import Path
from typing import Optional

from sarb.core.config import HistoryConfig
from sarb.core.errors import HistoryUnavailable
from sarb.history.base import (
    HistoryProvider,
    HistoryProviderFactory,
    ProjectionOutcome,
    Unchanged,
    outcome_for,
)
from sarb.history.diff import DiffParseError, DiffSet, compose, parse_unified_diff
from sarb.models.base import Location, ProjectRoot, Revision
from sarb.utils.logging import ComponentLogger

GIT_IDENTIFIER = "git"


class GitHistoryProvider(HistoryProvider):
    """
    History provider backed by the ``git`` command line.

    Parsed diffs are cached per revision pair, so each pair costs one set
    of git invocations regardless of how many findings are projected.
    """

    def __init__(
        self,
        repo_path: Path,
        config: Optional[HistoryConfig] = None,
    ) -> None:
        """
        Initialize the provider.

        Args:
            repo_path: Directory inside the repository. Diff paths are
                reported relative to it.
            config: History configuration.
        """
        self.repo_path = Path(repo_path)
        self.config = config or HistoryConfig()
        self.logger = ComponentLogger("git", parent="history")
        self._cache: dict[tuple[str, str], list[DiffSet]] = {}
        self._lock = threading.Lock()

    @property
    def identifier(self) -> str:
        return GIT_IDENTIFIER

    def project_location(
        self,
        location: Location,
        from_revision: Revision,
        to_revision: Revision,
    ) -> ProjectionOutcome:
        """Project a location through the git history between two revisions."""
        if from_revision == to_revision:
            return Unchanged(location)

        diff_chain = self._get_diff_chain(from_revision, to_revision)
        projected = compose(diff_chain, location)
        outcome = outcome_for(location, projected)
        self.logger.debug(
            "Projected location",
            location=str(location),
            outcome=type(outcome).__name__,
            projected=str(projected) if projected else None,
        )
        return outcome

    def current_revision(self) -> Revision:
        """Get the commit currently checked out (HEAD)."""
        sha = self._run_git("rev-parse", "--verify", "HEAD").strip()
        return Revision(sha)

    def _get_diff_chain(self, from_revision: Revision, to_revision: Revision) -> list[DiffSet]:
        """Get the parsed diffs leading from one revision to another, oldest first."""
        key = (from_revision.identifier, to_revision.identifier)
        with self._lock:
            if key not in self._cache:
                self._cache[key] = self._load_diff_chain(from_revision, to_revision)
            return self._cache[key]

    def _load_diff_chain(self, from_revision: Revision, to_revision: Revision) -> list[DiffSet]:
        self._verify_commit(from_revision)
        if not to_revision.is_working_tree:
            self._verify_commit(to_revision)

        if not self.config.walk_commits:
            diff_set = self._diff(from_revision.identifier, self._diff_target(to_revision))
            self.logger.info(
                "Loaded history",
                from_revision=from_revision.identifier,
                to_revision=to_revision.identifier,
                files_changed=len(diff_set),
            )
            return [diff_set]

        end = "HEAD" if to_revision.is_working_tree else to_revision.identifier
        commits = self._run_git(
            "rev-list", "--reverse", "--first-parent", f"{from_revision.identifier}..{end}"
        ).split()

        chain: list[DiffSet] = []
        previous = from_revision.identifier
        for commit in commits:
            chain.append(self._diff(previous, commit))
            previous = commit
        if to_revision.is_working_tree:
            chain.append(self._diff(previous, None))

        self.logger.info(
            "Loaded history",
            from_revision=from_revision.identifier,
            to_revision=to_revision.identifier,
            commits=len(commits),
            diffs=len(chain),
        )
        return chain

    @staticmethod
    def _diff_target(revision: Revision) -> Optional[str]:
        return None if revision.is_working_tree else revision.identifier

    def _verify_commit(self, revision: Revision) -> None:
        try:
            self._run_git("rev-parse", "--verify", "--quiet", f"{revision.identifier}^{{commit}}")
        except HistoryUnavailable as e:
            raise HistoryUnavailable(
                "Revision not found in repository",
                revision=revision.identifier,
            ) from e

    def _diff(self, old: str, new: Optional[str]) -> DiffSet:
        """Diff old against new, or against the working tree when new is None."""
        args = [
            "diff",
            "--no-color",
            "--no-ext-diff",
            "--relative",
            "--src-prefix=a/",
            "--dst-prefix=b/",
            "-M" if self.config.detect_renames else "--no-renames",
        ]
        if self.config.ignore_whitespace:
            args.append("-w")
        args.append(old)
        if new is not None:
            args.append(new)
        args.append("--")

        output = self._run_git(*args)
        try:
            return parse_unified_diff(output)
        except DiffParseError as e:
            raise HistoryUnavailable(f"Could not parse git diff output: {e}", revision=old) from e

    def _run_git(self, *args: str) -> str:
        """
        Run a git command in the repository.

        Raises:
            HistoryUnavailable: If git is missing, times out or fails.
        """
        cmd = [
            self.config.git_binary,
            "-C",
            str(self.repo_path),
            "-c",
            "core.quotePath=false",
            *args,
        ]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                timeout=self.config.timeout,
            )
        except FileNotFoundError as e:
            raise HistoryUnavailable(f"git executable not found: {self.config.git_binary}") from e
        except subprocess.TimeoutExpired as e:
            raise HistoryUnavailable(
                f"git {args[0]} timed out after {self.config.timeout}s"
            ) from e

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            stderr = stderr or f"exit code {result.returncode}"
            raise HistoryUnavailable(f"git {args[0]} failed: {stderr}")

        # Decoded without newline translation so a lone \r in a tracked
        # file stays inside its diff line.
        return "\n".join(
            line.decode("utf-8", errors="replace") for line in result.stdout.split(b"\n")
        )


class GitHistoryProviderFactory(HistoryProviderFactory):
    """Creates GitHistoryProvider instances rooted at the project root."""

    @property
    def identifier(self) -> str:
        return GIT_IDENTIFIER

    def create(
        self,
        project_root: ProjectRoot,
        config: Optional[HistoryConfig] = None,
    ) -> GitHistoryProvider:
        return GitHistoryProvider(project_root.root, config)
