"""CLI runner orchestration.

This module handles command dispatch and execution for the covsubmit CLI.
"""

from __future__ import annotations

from argparse import Namespace
from pathlib import Path
from typing import Iterable, Optional

from importlib.metadata import version, PackageNotFoundError

from covsubmit.cli.arguments import build_parser
from covsubmit.cli.commands import Command
from covsubmit.cli.commands.aggregate import AggregateCommand
from covsubmit.cli.commands.report import ReportCommand
from covsubmit.cli.commands.validate import ValidateCommand
from covsubmit.cli.config_bridge import ConfigBridge
from covsubmit.cli.exit_codes import (
    EXIT_INVALID_USAGE,
    EXIT_PROCESSING_ERROR,
    EXIT_SUBMISSION_ERROR,
    EXIT_SUCCESS,
)
from covsubmit.config import load_config
from covsubmit.config.loader import ConfigError
from covsubmit.core.errors import BuildOrderError, ProcessingError, SubmissionError
from covsubmit.core.logging import configure_logging, get_logger

LOGGER = get_logger(__name__)


def get_version() -> str:
    """Get covsubmit version.

    Returns:
        Version string from package metadata or fallback.
    """
    try:
        return version("covsubmit")
    except PackageNotFoundError:
        # Fallback for editable installs that have not yet built metadata.
        from covsubmit import __version__
        return __version__


class CLIRunner:
    """Orchestrates CLI execution with subcommand dispatch."""

    def __init__(self) -> None:
        """Initialize CLIRunner with parser and commands."""
        self.parser = build_parser()
        self._version = get_version()
        self.report_cmd = ReportCommand()
        self.aggregate_cmd = AggregateCommand()
        self.validate_cmd = ValidateCommand()

    def run(self, argv: Optional[Iterable[str]] = None) -> int:
        """Run the CLI.

        Args:
            argv: Command-line arguments (defaults to sys.argv).

        Returns:
            Exit code.
        """
        # Handle --help specially to return 0
        if argv is not None:
            argv_list: Optional[list] = list(argv)
            if argv_list == ["--help"] or argv_list == ["-h"]:
                self.parser.print_help()
                return EXIT_SUCCESS
        else:
            argv_list = None

        try:
            args = self.parser.parse_args(argv_list)
        except SystemExit as e:
            # argparse exits on usage errors and on subcommand --help
            return EXIT_SUCCESS if e.code in (0, None) else EXIT_INVALID_USAGE

        # Configure logging as early as possible
        configure_logging(
            debug=args.debug,
            verbose=args.verbose,
            quiet=args.quiet,
        )

        if args.version:
            print(self._version)
            return EXIT_SUCCESS

        command = getattr(args, "command", None)

        if command == "report":
            return self._handle_submission(self.report_cmd, args)
        elif command == "aggregate":
            return self._handle_submission(self.aggregate_cmd, args)
        elif command == "validate":
            return self.validate_cmd.execute(args)
        else:
            # No command specified - show help
            self.parser.print_help()
            return EXIT_SUCCESS

    def _handle_submission(self, command: Command, args: Namespace) -> int:
        """Load configuration and run a submitting command.

        Args:
            command: The report or aggregate command.
            args: Parsed command-line arguments.

        Returns:
            Exit code.
        """
        project_root = Path(args.path).resolve()
        cli_overrides = ConfigBridge.args_to_overrides(args)

        try:
            config = load_config(
                project_root=project_root,
                cli_config_path=getattr(args, "config", None),
                cli_overrides=cli_overrides,
            )
            return command.execute(args, config)
        except (ConfigError, BuildOrderError) as e:
            LOGGER.error(str(e))
            return EXIT_INVALID_USAGE
        except ProcessingError as e:
            LOGGER.error(str(e))
            return EXIT_PROCESSING_ERROR
        except SubmissionError as e:
            if args.debug:
                LOGGER.exception("Submission failed")
            LOGGER.error(str(e))
            return EXIT_SUBMISSION_ERROR
        except OSError as e:
            LOGGER.error(f"{command.name} failed: {e}")
            return EXIT_PROCESSING_ERROR
