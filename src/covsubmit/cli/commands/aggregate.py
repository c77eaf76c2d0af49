"""Aggregate command implementation."""

from __future__ import annotations

from argparse import Namespace
from pathlib import Path
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from covsubmit.config.models import CovsubmitConfig

from covsubmit.build.maven import find_reactor_root, load_project_graph, module_for_dir
from covsubmit.build.models import Module
from covsubmit.build.order import AggregationPlan, BuildOrderResolver
from covsubmit.build.reactor import find_module, load_reactor
from covsubmit.cli.commands import Command
from covsubmit.cli.commands.report import print_result
from covsubmit.cli.exit_codes import EXIT_SUCCESS
from covsubmit.config.loader import get_default_config
from covsubmit.core.errors import BuildOrderError
from covsubmit.core.logging import get_logger
from covsubmit.parsers.registry import default_coverage_file
from covsubmit.pipeline.submission import SubmissionPipeline

LOGGER = get_logger(__name__)


class AggregateCommand(Command):
    """Submits the merged coverage of a multi-module build."""

    @property
    def name(self) -> str:
        """Command identifier."""
        return "aggregate"

    def execute(self, args: Namespace, config: "CovsubmitConfig | None" = None) -> int:
        """Execute the aggregate command.

        Resolves the build order from a reactor file (explicit list) or from
        the pom.xml tree (graph walk), then submits when the current module
        is the last one to build.

        Args:
            args: Parsed command-line arguments.
            config: Loaded covsubmit configuration.

        Returns:
            Exit code (errors propagate to the runner).
        """
        config = config or get_default_config()
        module_dir = Path(args.path).resolve()
        resolver = BuildOrderResolver(config.coverage_file or default_coverage_file(config.format))

        reactor_file = getattr(args, "reactor", None)
        if reactor_file is not None:
            plan = self._resolve_reactor(resolver, Path(reactor_file), module_dir, getattr(args, "module", None))
        else:
            plan = self._resolve_graph(resolver, module_dir, getattr(args, "root", None))

        result = SubmissionPipeline(config).run_aggregate(plan)
        if result is None and not plan.triggered:
            print(f"Not aggregating in module '{plan.current.name}': it is not the last module to build.")
        print_result(result)
        return EXIT_SUCCESS

    def _resolve_reactor(
        self,
        resolver: BuildOrderResolver,
        reactor_file: Path,
        module_dir: Path,
        module_name: "str | None",
    ) -> AggregationPlan:
        modules = load_reactor(reactor_file)
        if module_name:
            current = find_module(modules, module_name)
        else:
            current = self._module_at(modules, module_dir)
        return resolver.resolve_reactor(current, modules)

    def _resolve_graph(
        self,
        resolver: BuildOrderResolver,
        module_dir: Path,
        root: "Path | None",
    ) -> AggregationPlan:
        root_dir = Path(root).resolve() if root is not None else find_reactor_root(module_dir)
        LOGGER.debug(f"Loading project graph from {root_dir}")
        graph = load_project_graph(root_dir)
        current = module_for_dir(graph, module_dir)
        return resolver.resolve_graph(current, graph)

    @staticmethod
    def _module_at(modules: List[Module], module_dir: Path) -> Module:
        for module in modules:
            if module.base_dir.resolve() == module_dir:
                return module
        raise BuildOrderError(
            f"No module of the reactor is located at {module_dir}; use --module to name it"
        )
