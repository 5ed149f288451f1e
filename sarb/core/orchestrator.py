"""
Orchestration of baseline creation and baseline removal.

Wires parsers, history providers, baseline files and the pruning engine
together for the CLI. Both services receive their registries explicitly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from sarb.baseline.snapshot import BaselineSnapshot
from sarb.core.config import SarbConfig
from sarb.core.registry import Registry
from sarb.history.base import HistoryProvider, HistoryProviderFactory
from sarb.models.base import WORKING_TREE, ProjectRoot
from sarb.parsers.base import ResultsParser
from sarb.pruning.engine import PruningEngine
from sarb.pruning.results import PrunedResults
from sarb.utils.logging import ComponentLogger


class BaselineCreator:
    """
    Records the current analysis results as a baseline.

    Example:
        creator = BaselineCreator(parsers, histories, config)
        snapshot = creator.create(Path("baseline.sarb"), output, "sarif", root)
    """

    def __init__(
        self,
        parser_registry: Registry[ResultsParser],
        history_registry: Registry[HistoryProviderFactory],
        config: Optional[SarbConfig] = None,
    ) -> None:
        self.parser_registry = parser_registry
        self.history_registry = history_registry
        self.config = config or SarbConfig()
        self.logger = ComponentLogger("create", parent="orchestrator")

    def create(
        self,
        baseline_file: Path,
        analysis_output: str,
        parser_code: str,
        project_root: ProjectRoot,
        history_code: Optional[str] = None,
    ) -> BaselineSnapshot:
        """
        Parse analysis output and save it as a baseline.

        Args:
            baseline_file: Where to write the baseline.
            analysis_output: Raw static analysis tool output.
            parser_code: Identifier of the parser for the output.
            project_root: Root of the analysed project.
            history_code: History provider identifier; defaults to config.

        Returns:
            The saved snapshot.
        """
        parser = self.parser_registry.get(parser_code)
        factory = self.history_registry.get(history_code or self.config.baseline.history_provider)

        results = parser.parse(analysis_output, project_root)
        history = factory.create(project_root, self.config.history)
        revision = history.current_revision()

        snapshot = BaselineSnapshot(
            revision=revision,
            results=results,
            parser_identifier=parser.identifier,
            history_provider=factory.identifier,
        )
        snapshot.save(baseline_file)

        self.logger.info(
            "Baseline created",
            file=str(baseline_file),
            results=len(results),
            revision=revision.identifier,
        )
        return snapshot


class ResultsPruner:
    """
    Removes baselined findings from the latest analysis results.

    Example:
        pruner = ResultsPruner(parsers, histories, config)
        pruned = pruner.get_pruned_results(Path("baseline.sarb"), output, root)
    """

    def __init__(
        self,
        parser_registry: Registry[ResultsParser],
        history_registry: Registry[HistoryProviderFactory],
        config: Optional[SarbConfig] = None,
    ) -> None:
        self.parser_registry = parser_registry
        self.history_registry = history_registry
        self.config = config or SarbConfig()
        self.logger = ComponentLogger("remove", parent="orchestrator")

    def get_pruned_results(
        self,
        baseline_file: Path,
        analysis_output: str,
        project_root: ProjectRoot,
        history: Optional[HistoryProvider] = None,
    ) -> PrunedResults:
        """
        Prune the latest analysis results against a baseline file.

        The output is parsed with the parser recorded in the baseline, and
        baseline findings are projected to the working tree.

        Args:
            baseline_file: Baseline to prune with.
            analysis_output: Raw output of the latest analysis run.
            project_root: Root of the analysed project.
            history: Provider to use instead of the one the baseline names.

        Raises:
            BaselineFileError: If the baseline cannot be loaded.
            InvalidChoiceError: If the baseline names an unknown parser or provider.
            ParseError: If the analysis output cannot be parsed.
            HistoryUnavailable: If history cannot be read.
        """
        baseline = BaselineSnapshot.load(baseline_file)
        parser = self.parser_registry.get(baseline.parser_identifier)
        if history is None:
            factory = self.history_registry.get(baseline.history_provider)
            history = factory.create(project_root, self.config.history)

        current = parser.parse(analysis_output, project_root)
        self.logger.debug(
            "Loaded inputs",
            baseline=baseline.count,
            current=len(current),
            parser=parser.identifier,
        )

        engine = PruningEngine(self.config.matching)
        return engine.prune(baseline, current, history, WORKING_TREE)
