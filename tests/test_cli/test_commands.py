"""Tests for CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from sarb.cli.commands import (
    EXIT_CONFIG_ERROR,
    EXIT_NEW_ISSUES,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    cli,
)
from sarb.core.errors import BaselineFileError, HistoryUnavailable
from sarb.core.registry import Registry
from sarb.models.finding import AnalysisResults
from sarb.pruning.results import PrunedResults
from sarb.reporting import TableReporter
from sarb.reporting.base import BaseReporter

BASELINE_FILENAME = "baseline1.sarb"


class StubReporter(BaseReporter):
    """Reporter that only prints the residual count."""

    @property
    def identifier(self) -> str:
        return "stub"

    @property
    def file_extension(self) -> str:
        return ".stub"

    def generate(self, pruned_results: PrunedResults) -> str:
        return f"[stub output formatter: Issues since baseline {pruned_results.residual_count}]\n"


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def pruned_with(make_baseline, make_results):
    """Build pruned results: four baseline findings, two matched, N new."""

    def _pruned(new_issues: int) -> PrunedResults:
        baseline = make_baseline(*[(f"file{i}.py", i, f"type{i}") for i in range(1, 5)])
        matched = [(f"file{i}.py", i, f"type{i}") for i in range(1, 3)]
        new = [(f"new{i}.py", i, "fresh") for i in range(1, new_issues + 1)]
        current = make_results(*matched, *new)
        return PrunedResults(baseline, current, AnalysisResults(current.findings[2:]))

    return _pruned


@pytest.fixture
def mock_pruner(pruned_with):
    """Create a results pruner double returning N new issues."""

    def _pruner(new_issues: int = 0) -> MagicMock:
        pruner = MagicMock()
        pruner.get_pruned_results.return_value = pruned_with(new_issues)
        return pruner

    return _pruner


def invoke_remove(runner, temp_dir, obj, *args, input="[]"):
    return runner.invoke(
        cli,
        ["remove", BASELINE_FILENAME, "--project-root", str(temp_dir), *args],
        input=input,
        obj=obj,
    )


class TestCLIGroup:
    """Test main CLI group."""

    def test_cli_help(self, runner: CliRunner):
        """Should show help text."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Static Analysis Results Baseliner" in result.output

    def test_cli_version(self, runner: CliRunner):
        """Should show version."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "sarb" in result.output.lower()

    def test_cli_verbose_flag(self, runner: CliRunner):
        """Should accept verbose flag."""
        result = runner.invoke(cli, ["-v", "--help"])
        assert result.exit_code == 0

    def test_cli_quiet_flag(self, runner: CliRunner):
        """Should accept quiet flag."""
        result = runner.invoke(cli, ["-q", "--help"])
        assert result.exit_code == 0


class TestRemoveCommand:
    """Test remove command."""

    def test_no_new_issues(self, runner, temp_dir, mock_pruner):
        """Should exit cleanly and print the counts."""
        result = invoke_remove(runner, temp_dir, {"results_pruner": mock_pruner(0)})

        assert result.exit_code == EXIT_SUCCESS
        assert "Latest analysis issue count: 2" in result.output
        assert "Baseline issue count: 4" in result.output
        assert "Issue count with baseline removed: 0" in result.output
        assert "No new issues since baseline." in result.output

    def test_one_new_issue(self, runner, temp_dir, mock_pruner):
        """Should exit with the new-issues code."""
        result = invoke_remove(runner, temp_dir, {"results_pruner": mock_pruner(1)})

        assert result.exit_code == EXIT_NEW_ISSUES
        assert "Issue count with baseline removed: 1" in result.output
        assert "new1.py" in result.output

    def test_passes_inputs_to_pruner(self, runner, temp_dir, mock_pruner):
        """Should hand stdin and the baseline path to the pruner."""
        pruner = mock_pruner(0)
        invoke_remove(runner, temp_dir, {"results_pruner": pruner}, input="analysis output")

        baseline_file, analysis_output, project_root = pruner.get_pruned_results.call_args.args
        assert baseline_file == Path(BASELINE_FILENAME)
        assert analysis_output == "analysis output"
        assert project_root.root == temp_dir

    def test_reads_input_file(self, runner, temp_dir, mock_pruner):
        """Should read analysis output from --input instead of stdin."""
        pruner = mock_pruner(0)
        results_file = temp_dir / "results.json"
        results_file.write_text("from file")

        invoke_remove(runner, temp_dir, {"results_pruner": pruner}, "--input", str(results_file))

        assert pruner.get_pruned_results.call_args.args[1] == "from file"

    def test_pick_non_default_output_format(self, runner, temp_dir, mock_pruner):
        """Should render with the requested formatter."""
        reporters = Registry("output-format", [TableReporter(), StubReporter()])
        result = invoke_remove(
            runner,
            temp_dir,
            {"results_pruner": mock_pruner(8), "reporter_registry": reporters},
            "--output-format",
            "stub",
        )

        assert result.exit_code == EXIT_NEW_ISSUES
        assert "[stub output formatter: Issues since baseline 8]" in result.output

    def test_json_output(self, runner, temp_dir, mock_pruner):
        """Should emit the JSON report."""
        result = invoke_remove(runner, temp_dir, {"results_pruner": mock_pruner(3)}, "-f", "json")

        assert result.exit_code == EXIT_NEW_ISSUES
        assert '"residual": 3' in result.output

    def test_report_written_to_file(self, runner, temp_dir, mock_pruner):
        """Should write the report to --output."""
        output = temp_dir / "report.txt"
        result = invoke_remove(
            runner, temp_dir, {"results_pruner": mock_pruner(2)}, "-f", "text", "-o", str(output)
        )

        assert result.exit_code == EXIT_NEW_ISSUES
        assert output.read_text() == "new1.py:1 fresh\nnew2.py:2 fresh\n"

    def test_unwritable_report_file(self, runner, temp_dir, mock_pruner):
        """Should fail with the runtime error code when the report cannot be written."""
        output = temp_dir / "missing" / "report.json"
        result = invoke_remove(
            runner, temp_dir, {"results_pruner": mock_pruner(0)}, "-f", "json", "-o", str(output)
        )

        assert result.exit_code == EXIT_RUNTIME_ERROR
        assert "Writing report failed" in result.output
        assert not output.exists()

    def test_invalid_output_format(self, runner, temp_dir, mock_pruner):
        """Should list the valid formats and exit with a config error."""
        pruner = mock_pruner(0)
        result = invoke_remove(runner, temp_dir, {"results_pruner": pruner}, "--output-format", "rubbish")

        assert result.exit_code == EXIT_CONFIG_ERROR
        assert (
            "Invalid value [rubbish] for option [output-format]. Pick one of: table|json|text"
            in result.output
        )
        pruner.get_pruned_results.assert_not_called()

    def test_history_unavailable(self, runner, temp_dir):
        """Should fail with the runtime error code."""
        pruner = MagicMock()
        pruner.get_pruned_results.side_effect = HistoryUnavailable("git diff failed", revision="abc")

        result = invoke_remove(runner, temp_dir, {"results_pruner": pruner})

        assert result.exit_code == EXIT_RUNTIME_ERROR
        assert "Baseline removal failed" in result.output
        assert "git diff failed" in result.output

    def test_baseline_file_error(self, runner, temp_dir):
        """Should treat a broken baseline file as a config error."""
        pruner = MagicMock()
        pruner.get_pruned_results.side_effect = BaselineFileError("Cannot read baseline")

        result = invoke_remove(runner, temp_dir, {"results_pruner": pruner})

        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "Cannot read baseline" in result.output

    def test_unexpected_error_verbose(self, runner, temp_dir):
        """Should show the traceback for unexpected failures when verbose."""
        pruner = MagicMock()
        pruner.get_pruned_results.side_effect = RuntimeError("boom")

        result = runner.invoke(
            cli,
            ["-v", "remove", BASELINE_FILENAME, "--project-root", str(temp_dir)],
            input="[]",
            obj={"results_pruner": pruner},
        )

        assert result.exit_code == EXIT_RUNTIME_ERROR
        assert "boom" in result.output
        assert "Traceback" in result.output

    def test_quiet_hides_counts(self, runner, temp_dir, mock_pruner):
        """Should print only the report when quiet."""
        result = runner.invoke(
            cli,
            ["-q", "remove", BASELINE_FILENAME, "--project-root", str(temp_dir)],
            input="[]",
            obj={"results_pruner": mock_pruner(0)},
        )

        assert result.exit_code == EXIT_SUCCESS
        assert "Latest analysis issue count" not in result.output

    def test_options_reach_config(self, runner, temp_dir, pruned_with):
        """Should map matching and history options onto the configuration."""
        with patch("sarb.cli.commands.ResultsPruner") as pruner_cls:
            pruner_cls.return_value.get_pruned_results.return_value = pruned_with(0)
            result = invoke_remove(
                runner, temp_dir, {}, "--strict", "--walk-commits", "--workers", "3", "--git-timeout", "9"
            )

        assert result.exit_code == EXIT_SUCCESS
        config = pruner_cls.call_args.args[2]
        assert config.matching.include_message is True
        assert config.matching.max_workers == 3
        assert config.history.walk_commits is True
        assert config.history.timeout == 9

    def test_invalid_config_file(self, runner, temp_dir, mock_pruner):
        """Should exit with a config error when .sarb.yml is invalid."""
        (temp_dir / ".sarb.yml").write_text("matching:\n  max_workers: 0\n")
        result = invoke_remove(runner, temp_dir, {"results_pruner": mock_pruner(0)})

        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "Configuration error" in result.output


class TestCreateCommand:
    """Test create command."""

    def test_create(self, runner, temp_dir, make_baseline):
        """Should pass the input format and default baseline path to the creator."""
        creator = MagicMock()
        creator.create.return_value = make_baseline(("a.py", 1, "E1"), ("a.py", 2, "E1"))

        result = runner.invoke(
            cli,
            ["create", "--input-format", "sarif", "--project-root", str(temp_dir)],
            input="{}",
            obj={"baseline_creator": creator},
        )

        assert result.exit_code == EXIT_SUCCESS
        baseline_file, analysis_output, parser_code, project_root = creator.create.call_args.args
        assert baseline_file == Path("baseline.sarb")
        assert analysis_output == "{}"
        assert parser_code == "sarif"
        assert project_root.root == temp_dir
        assert "Issues in baseline: 2" in result.output

    def test_invalid_input_format(self, runner, temp_dir):
        """Should reject unknown input formats."""
        result = runner.invoke(
            cli,
            ["create", str(temp_dir / "b.sarb"), "--input-format", "phpstan", "--project-root", str(temp_dir)],
            input="[]",
        )

        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "Invalid value [phpstan] for option [input-format]" in result.output

    def test_parse_error(self, runner, temp_dir):
        """Should exit with a config error on unreadable output."""
        result = runner.invoke(
            cli,
            ["create", str(temp_dir / "b.sarb"), "--project-root", str(temp_dir)],
            input="not json",
        )

        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "[sarb-json]" in result.output

    def test_history_unavailable(self, runner, temp_dir):
        """Should fail with the runtime error code when no revision is available."""
        creator = MagicMock()
        creator.create.side_effect = HistoryUnavailable("not a git repository")

        result = runner.invoke(
            cli,
            ["create", "--project-root", str(temp_dir)],
            input="[]",
            obj={"baseline_creator": creator},
        )

        assert result.exit_code == EXIT_RUNTIME_ERROR
        assert "Baseline creation failed" in result.output


class TestEndToEnd:
    """Run create and remove against a real repository."""

    def test_create_then_remove(self, runner, git_repo: Path, commit):
        """Should only report the issue introduced after the baseline."""
        source = "".join(f"line_{i} = {i}\n" for i in range(1, 11))
        (git_repo / "app.py").write_text(source)
        commit(git_repo, "initial")
        baseline_file = git_repo / "baseline.sarb"

        before = json.dumps([{"file": "app.py", "line": 4, "type": "E1", "message": "m"}])
        result = runner.invoke(
            cli,
            ["create", str(baseline_file), "--project-root", str(git_repo)],
            input=before,
        )
        assert result.exit_code == EXIT_SUCCESS, result.output
        assert json.loads(baseline_file.read_text())["results_parser"] == "sarb-json"

        (git_repo / "app.py").write_text("# header\n" + source)
        after = json.dumps([
            {"file": "app.py", "line": 5, "type": "E1", "message": "m"},
            {"file": "app.py", "line": 1, "type": "E7", "message": "new"},
        ])
        result = runner.invoke(
            cli,
            ["remove", str(baseline_file), "--project-root", str(git_repo), "-f", "text"],
            input=after,
        )

        assert result.exit_code == EXIT_NEW_ISSUES, result.output
        assert "app.py:1 E7 new" in result.output
        assert "Issue count with baseline removed: 1" in result.output


class TestListingCommands:
    """Test list-parsers and list-formats."""

    def test_list_parsers(self, runner: CliRunner):
        """Should list the bundled parsers."""
        result = runner.invoke(cli, ["list-parsers"])
        assert result.exit_code == 0
        assert "sarb-json" in result.output
        assert "sarif" in result.output

    def test_list_formats(self, runner: CliRunner):
        """Should list the bundled output formats."""
        result = runner.invoke(cli, ["list-formats"])
        assert result.exit_code == 0
        for code in ("table", "json", "text"):
            assert code in result.output


class TestVersionCommand:
    """Test version command."""

    def test_version(self, runner: CliRunner):
        """Should show version info."""
        result = runner.invoke(cli, ["version"])
        assert result.exit_code == 0
        assert "SARB" in result.output
        assert "Python" in result.output


class TestInitCommand:
    """Test init command."""

    def test_init_creates_config(self, runner: CliRunner, temp_dir: Path):
        """Should create .sarb.yml file."""
        result = runner.invoke(cli, ["init", str(temp_dir)])

        assert result.exit_code == 0
        assert (temp_dir / ".sarb.yml").exists()
        assert "results_parser" in (temp_dir / ".sarb.yml").read_text()

    def test_init_no_overwrite(self, runner: CliRunner, temp_dir: Path):
        """Should not overwrite existing config without --force."""
        config_file = temp_dir / ".sarb.yml"
        config_file.write_text("existing: config")

        result = runner.invoke(cli, ["init", str(temp_dir)])

        assert result.exit_code == 0
        assert "already exists" in result.output
        assert config_file.read_text() == "existing: config"

    def test_init_force_overwrite(self, runner: CliRunner, temp_dir: Path):
        """Should overwrite with --force."""
        config_file = temp_dir / ".sarb.yml"
        config_file.write_text("existing: config")

        result = runner.invoke(cli, ["init", str(temp_dir), "--force"])

        assert result.exit_code == 0
        assert config_file.read_text() != "existing: config"
