"""Coverage report parsers.

Each supported report format has one parser; the registry maps format names
from configuration to parser classes.
"""

from covsubmit.parsers.base import CoverageParser, FileCoverage, SourceCallback
from covsubmit.parsers.cobertura import CoberturaParser
from covsubmit.parsers.jacoco import JaCoCoParser
from covsubmit.parsers.multiple import MultipleCoverageParser
from covsubmit.parsers.registry import create_parser, default_coverage_file, list_formats

__all__ = [
    "CoberturaParser",
    "CoverageParser",
    "FileCoverage",
    "JaCoCoParser",
    "MultipleCoverageParser",
    "SourceCallback",
    "create_parser",
    "default_coverage_file",
    "list_formats",
]
