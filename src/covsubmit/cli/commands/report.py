"""Report command implementation."""

from __future__ import annotations

import dataclasses
from argparse import Namespace
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from covsubmit.config.models import CovsubmitConfig

from covsubmit.build.maven import POM_FILE, read_module
from covsubmit.build.models import DEFAULT_SOURCE_ROOT, Module
from covsubmit.cli.commands import Command
from covsubmit.cli.exit_codes import EXIT_SUCCESS
from covsubmit.config.loader import get_default_config
from covsubmit.core.logging import get_logger
from covsubmit.http.client import SubmissionResult
from covsubmit.pipeline.submission import SubmissionPipeline

LOGGER = get_logger(__name__)


def print_result(result: Optional[SubmissionResult]) -> None:
    """Print the outcome of a submission for the user."""
    if result is None:
        return
    print(f"Coverage submitted to Coveralls: {result.message or 'OK'}")
    if result.url:
        print(f"  {result.url}")


class ReportCommand(Command):
    """Submits the coverage of a single module."""

    @property
    def name(self) -> str:
        """Command identifier."""
        return "report"

    def execute(self, args: Namespace, config: "CovsubmitConfig | None" = None) -> int:
        """Execute the report command.

        Args:
            args: Parsed command-line arguments.
            config: Loaded covsubmit configuration.

        Returns:
            Exit code (errors propagate to the runner).
        """
        config = config or get_default_config()
        module = self._load_module(Path(args.path).resolve())

        source_roots = getattr(args, "source_roots", None)
        if source_roots:
            module = dataclasses.replace(
                module, source_roots=tuple(Path(root).resolve() for root in source_roots)
            )

        result = SubmissionPipeline(config).run_single(module)
        print_result(result)
        return EXIT_SUCCESS

    def _load_module(self, module_dir: Path) -> Module:
        pom_file = module_dir / POM_FILE
        if pom_file.is_file():
            module, _ = read_module(pom_file)
            return module

        LOGGER.debug(f"No {POM_FILE} in {module_dir}, using default Maven layout")
        return Module(
            name=module_dir.name,
            base_dir=module_dir,
            source_roots=(module_dir / DEFAULT_SOURCE_ROOT,),
        )
