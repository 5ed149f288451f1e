"""Pytest configuration and shared fixtures."""

import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

import pytest

from sarb.baseline.snapshot import BaselineSnapshot
from sarb.core.errors import HistoryUnavailable
from sarb.history.base import (
    HistoryProvider,
    HistoryProviderFactory,
    ProjectionOutcome,
    outcome_for,
)
from sarb.models.base import Location, ProjectRoot, Revision
from sarb.models.finding import AnalysisResults, AnalysisResultsBuilder

BASELINE_REVISION = Revision("a1b2c3d4")


class StubHistoryProvider(HistoryProvider):
    """
    History provider driven by a lookup table.

    Locations in ``moves`` map to another location (or None when deleted);
    every other location passes through unchanged.
    """

    def __init__(
        self,
        moves: Optional[dict[Location, Optional[Location]]] = None,
        fail: bool = False,
        revision: Revision = BASELINE_REVISION,
    ) -> None:
        self.moves = moves or {}
        self.fail = fail
        self.revision = revision
        self.calls: list[Location] = []

    @property
    def identifier(self) -> str:
        return "stub"

    def project_location(
        self,
        location: Location,
        from_revision: Revision,
        to_revision: Revision,
    ) -> ProjectionOutcome:
        self.calls.append(location)
        if self.fail:
            raise HistoryUnavailable("stub history is offline", revision=from_revision.identifier)
        projected = self.moves.get(location, location)
        return outcome_for(location, projected)

    def current_revision(self) -> Revision:
        return self.revision


class StubHistoryFactory(HistoryProviderFactory):
    """Factory that always hands out the same stub provider."""

    def __init__(self, provider: Optional[StubHistoryProvider] = None) -> None:
        self.provider = provider or StubHistoryProvider()

    @property
    def identifier(self) -> str:
        return "stub"

    def create(self, project_root, config=None) -> StubHistoryProvider:
        return self.provider


def build_results(*findings: tuple) -> AnalysisResults:
    """Build results from (file, line, type[, message]) tuples."""
    builder = AnalysisResultsBuilder()
    for finding in findings:
        builder.add_finding(*finding)
    return builder.build()


def build_baseline(*findings: tuple, parser: str = "sarb-json") -> BaselineSnapshot:
    """Build a baseline at BASELINE_REVISION from (file, line, type[, message]) tuples."""
    return BaselineSnapshot(
        revision=BASELINE_REVISION,
        results=build_results(*findings),
        parser_identifier=parser,
        history_provider="stub",
    )


def run_git(repo: Path, *args: str) -> str:
    """Run git in a test repository."""
    result = subprocess.run(
        ["git", "-C", str(repo), *args],
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp = tempfile.mkdtemp()
    yield Path(temp)
    shutil.rmtree(temp, ignore_errors=True)


@pytest.fixture
def project_root(temp_dir) -> ProjectRoot:
    """Project root at the temporary directory."""
    return ProjectRoot.from_project_root(temp_dir, temp_dir)


@pytest.fixture
def stub_history() -> StubHistoryProvider:
    """History provider where nothing has moved."""
    return StubHistoryProvider()


@pytest.fixture
def make_history():
    """Factory for stub history providers."""
    return StubHistoryProvider


@pytest.fixture
def make_history_factory():
    """Factory for stub history provider factories."""
    return StubHistoryFactory


@pytest.fixture
def make_results():
    """Factory building AnalysisResults from (file, line, type[, message]) tuples."""
    return build_results


@pytest.fixture
def make_baseline():
    """Factory building a baseline at BASELINE_REVISION."""
    return build_baseline


@pytest.fixture
def git_repo(temp_dir) -> Path:
    """Initialise an empty git repository with a committer identity."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    run_git(temp_dir, "init", "-q")
    run_git(temp_dir, "config", "user.email", "dev@example.com")
    run_git(temp_dir, "config", "user.name", "Developer")
    run_git(temp_dir, "config", "commit.gpgsign", "false")
    return temp_dir


@pytest.fixture
def commit():
    """Stage everything in a repository and commit; returns the new sha."""

    def _commit(repo: Path, message: str = "change") -> str:
        run_git(repo, "add", "-A")
        run_git(repo, "commit", "-q", "-m", message)
        return run_git(repo, "rev-parse", "HEAD").strip()

    return _commit


@pytest.fixture
def sample_sarif() -> str:
    """Minimal SARIF log with two results."""
    return """{
  "version": "2.1.0",
  "runs": [
    {
      "tool": {"driver": {"name": "semgrep"}},
      "results": [
        {
          "ruleId": "python.sql-injection",
          "level": "error",
          "message": {"text": "SQL built from user input"},
          "locations": [
            {"physicalLocation": {
              "artifactLocation": {"uri": "src/db.py"},
              "region": {"startLine": 12}
            }}
          ]
        },
        {
          "ruleId": "python.hardcoded-secret",
          "message": {"text": "Hardcoded secret"},
          "locations": [
            {"physicalLocation": {
              "artifactLocation": {"uri": "src/settings.py"},
              "region": {"startLine": 3}
            }}
          ]
        }
      ]
    }
  ]
}
"""
