"""Static registry of supported coverage report formats.

Formats are selected by configuration; there is no runtime discovery.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Type

from covsubmit.config.loader import ConfigError
from covsubmit.parsers.base import CoverageParser
from covsubmit.parsers.cobertura import CoberturaParser
from covsubmit.parsers.jacoco import JaCoCoParser
from covsubmit.sources.loader import SourceLoader

PARSERS: Dict[str, Type[CoverageParser]] = {
    "jacoco": JaCoCoParser,
    "cobertura": CoberturaParser,
}

# Report locations relative to a module's reporting output directory.
DEFAULT_COVERAGE_FILES: Dict[str, str] = {
    "jacoco": "jacoco/jacoco.xml",
    "cobertura": "cobertura/coverage.xml",
}


def list_formats() -> List[str]:
    """Names of the supported report formats."""
    return sorted(PARSERS)


def get_parser_class(format_name: str) -> Type[CoverageParser]:
    """Return the parser class for a format.

    Raises:
        ConfigError: If the format is not supported.
    """
    try:
        return PARSERS[format_name]
    except KeyError:
        raise ConfigError(
            f"Unsupported coverage format '{format_name}'. "
            f"Supported formats: {', '.join(list_formats())}"
        ) from None


def create_parser(format_name: str, coverage_file: Path, source_loader: SourceLoader) -> CoverageParser:
    """Instantiate the parser for ``format_name``."""
    return get_parser_class(format_name)(coverage_file, source_loader)


def default_coverage_file(format_name: str) -> str:
    """Default report path, relative to the reporting output directory."""
    get_parser_class(format_name)
    return DEFAULT_COVERAGE_FILES[format_name]
