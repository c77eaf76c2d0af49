"""Argument parser construction for covsubmit CLI.

This module builds the argument parser with subcommands:
- covsubmit report    - Submit coverage of a single module
- covsubmit aggregate - Submit merged coverage of a multi-module build
- covsubmit validate  - Validate the configuration file
"""

from __future__ import annotations

import argparse
from pathlib import Path

from covsubmit.config.validation import VALID_FORMATS, VALID_MERGE_POLICIES


def _add_global_options(parser: argparse.ArgumentParser) -> None:
    """Add global options available to all commands."""
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show covsubmit version and exit.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (info-level) logging.",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Reduce logging output to errors only.",
    )


def _add_submission_options(parser: argparse.ArgumentParser) -> None:
    """Options shared by the report and aggregate commands."""
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Module directory (default: current directory).",
    )

    report_group = parser.add_argument_group("report")
    report_group.add_argument(
        "--format",
        choices=sorted(VALID_FORMATS),
        default=None,
        help="Coverage report format (default: jacoco, or as specified in config file).",
    )
    report_group.add_argument(
        "--coverage-file",
        metavar="PATH",
        default=None,
        help="Report path relative to the module reporting directory.",
    )
    report_group.add_argument(
        "--source-encoding",
        metavar="ENCODING",
        default=None,
        help="Encoding of source files (default: utf-8).",
    )
    report_group.add_argument(
        "--json-file",
        metavar="PATH",
        default=None,
        help="Where to write the Coveralls JSON document (default: target/coveralls.json).",
    )

    submit_group = parser.add_argument_group("submission")
    submit_group.add_argument(
        "--repo-token",
        metavar="TOKEN",
        default=None,
        help="Coveralls repository token (default: $COVERALLS_REPO_TOKEN).",
    )
    submit_group.add_argument(
        "--coveralls-url",
        metavar="URL",
        default=None,
        help="Coveralls jobs endpoint.",
    )
    submit_group.add_argument(
        "--dry-run",
        action="store_true",
        help="Write the JSON document without submitting it.",
    )
    submit_group.add_argument(
        "--insecure-tls",
        action="store_true",
        help="Accept any server certificate (for TLS-intercepting proxies).",
    )

    config_group = parser.add_argument_group("configuration")
    config_group.add_argument(
        "--config",
        metavar="PATH",
        type=Path,
        help="Path to config file (default: .covsubmit.yml in module directory).",
    )


def _build_report_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'report' subcommand parser."""
    report_parser = subparsers.add_parser(
        "report",
        help="Submit coverage of a single module.",
        description=(
            "Parse the coverage report of one module, reconcile it with the "
            "module sources and submit it to Coveralls."
        ),
    )
    _add_submission_options(report_parser)
    report_parser.add_argument(
        "--source-root",
        action="append",
        dest="source_roots",
        metavar="DIR",
        type=Path,
        help="Source root directory (can be specified multiple times; default: from pom.xml).",
    )


def _build_aggregate_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'aggregate' subcommand parser."""
    aggregate_parser = subparsers.add_parser(
        "aggregate",
        help="Submit merged coverage of a multi-module build.",
        description=(
            "Merge the coverage reports of every module of a multi-module build "
            "and submit them as one job. Only the module that builds last "
            "submits; for any other module the command does nothing."
        ),
    )
    _add_submission_options(aggregate_parser)

    build_group = aggregate_parser.add_argument_group("build order")
    build_group.add_argument(
        "--reactor",
        metavar="FILE",
        type=Path,
        default=None,
        help="YAML file listing every module in build order.",
    )
    build_group.add_argument(
        "--module",
        metavar="NAME",
        default=None,
        help="Current module name in the reactor file (default: module at PATH).",
    )
    build_group.add_argument(
        "--root",
        metavar="DIR",
        type=Path,
        default=None,
        help="Root of the pom.xml tree (default: found by walking up from PATH).",
    )
    build_group.add_argument(
        "--merge-policy",
        choices=sorted(VALID_MERGE_POLICIES),
        default=None,
        help="How hits of one line from several reports combine (default: sum).",
    )


def _build_validate_parser(subparsers: argparse._SubParsersAction) -> None:
    """Build the 'validate' subcommand parser."""
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate a covsubmit configuration file.",
        description="Check a configuration file for syntax errors, invalid values and unknown keys.",
    )
    validate_parser.add_argument(
        "--config",
        metavar="PATH",
        type=Path,
        help="Path to config file (default: .covsubmit.yml in current directory).",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser for covsubmit CLI.

    Returns:
        Configured ArgumentParser instance with subcommands.
    """
    parser = argparse.ArgumentParser(
        prog="covsubmit",
        description="covsubmit - Submit JaCoCo/Cobertura coverage to Coveralls.",
        epilog=(
            "Examples:\n"
            "  covsubmit report                          # Submit this module\n"
            "  covsubmit report --dry-run                # Only write target/coveralls.json\n"
            "  covsubmit aggregate                       # Merge all modules below the pom.xml root\n"
            "  covsubmit aggregate --reactor reactor.yml # Use an explicit module list\n"
            "  covsubmit validate                        # Check .covsubmit.yml\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    _add_global_options(parser)

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        description="Available commands:",
        metavar="COMMAND",
    )

    _build_report_parser(subparsers)
    _build_aggregate_parser(subparsers)
    _build_validate_parser(subparsers)

    return parser
