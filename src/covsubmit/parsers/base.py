"""Base class for coverage report parsers.

Every parser reads one coverage artifact and produces FileCoverage records,
one per source file, reconciled against the source text known to a
SourceLoader. Consumers receive records through a SourceCallback.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional

import defusedxml.ElementTree as ET  # type: ignore[import-untyped]
from defusedxml import DefusedXmlException  # type: ignore[import-untyped]

from covsubmit.core.errors import ProcessingError
from covsubmit.core.logging import get_logger
from covsubmit.sources.loader import SourceFile, SourceLoader

__all__ = ["CoverageParser", "FileCoverage", "SourceCallback", "parse_int"]

LOGGER = get_logger(__name__)


@dataclass
class FileCoverage:
    """Per-line hit counts for a single source file.

    ``hits[i]`` is the execution count of line ``i + 1``, or None when the
    line is not coverable. Lines beyond the end of ``hits`` carry no data.
    """

    name: str
    hits: List[Optional[int]] = field(default_factory=list)
    source: Optional[SourceFile] = None

    def hit(self, line: int) -> Optional[int]:
        """Hit count for a 1-based line number, None when there is no data."""
        if line < 1 or line > len(self.hits):
            return None
        return self.hits[line - 1]

    @property
    def relevant_lines(self) -> int:
        """Number of coverable lines."""
        return sum(1 for h in self.hits if h is not None)

    @property
    def covered_lines(self) -> int:
        """Number of coverable lines executed at least once."""
        return sum(1 for h in self.hits if h)

    @property
    def percentage(self) -> float:
        """Coverage percentage for this file."""
        if self.relevant_lines == 0:
            return 100.0
        return (self.covered_lines / self.relevant_lines) * 100


SourceCallback = Callable[[FileCoverage], None]


class CoverageParser(ABC):
    """Abstract base class for coverage parsers.

    Subclasses implement records() as a generator. parse() feeds every record
    to a callback in the order the generator produces them.
    """

    def __init__(self, coverage_file: Path, source_loader: SourceLoader) -> None:
        """Initialize the parser.

        Args:
            coverage_file: Coverage artifact to read.
            source_loader: Loader used to reconcile hit arrays with source text.
        """
        self._coverage_file = Path(coverage_file)
        self._source_loader = source_loader

    @property
    @abstractmethod
    def name(self) -> str:
        """Report format identifier (e.g., 'jacoco', 'cobertura')."""

    @property
    def coverage_file(self) -> Path:
        """Path context of this parser."""
        return self._coverage_file

    @property
    def source_loader(self) -> SourceLoader:
        return self._source_loader

    @abstractmethod
    def records(self) -> Iterator[FileCoverage]:
        """Yield one FileCoverage per source file in the report.

        Raises:
            ProcessingError: If the report is malformed.
            OSError: If the report cannot be read.
        """

    def parse(self, callback: SourceCallback) -> None:
        """Parse the report, invoking ``callback`` once per source file."""
        LOGGER.debug(f"Parsing {self.name} report {self.coverage_file}")
        for record in self.records():
            callback(record)

    def _read_xml(self):
        """Parse the coverage file as XML and return the root element."""
        try:
            tree = ET.parse(self._coverage_file)
        except ET.ParseError as e:
            raise ProcessingError(f"Malformed {self.name} report {self._coverage_file}: {e}") from e
        except DefusedXmlException as e:
            raise ProcessingError(f"Rejected {self.name} report {self._coverage_file}: {e}") from e
        root = tree.getroot()
        if root is None:
            raise ProcessingError(f"Empty {self.name} report {self._coverage_file}")
        return root

    def _reconcile(self, name: str, line_hits: Dict[int, int]) -> FileCoverage:
        """Build a FileCoverage sized to the file's known line count.

        Reported lines past the end of the source are dropped. When the
        source is unknown, the array ends at the highest reported line.
        """
        source = self._source_loader.find(name)
        if source is not None:
            size = source.line_count
        else:
            size = max(line_hits, default=0)

        hits: List[Optional[int]] = [None] * size
        dropped = 0
        for line, count in line_hits.items():
            if line < 1:
                continue
            if line > size:
                dropped += 1
                continue
            hits[line - 1] = count

        if dropped:
            LOGGER.warning(
                f"{name}: {dropped} reported line(s) beyond the {size} lines of source "
                f"were ignored ({self._coverage_file})"
            )

        return FileCoverage(name=name, hits=hits, source=source)


def parse_int(value: Optional[str], what: str, report: Path) -> int:
    """Parse a numeric XML attribute, raising ProcessingError when invalid."""
    if value is None:
        raise ProcessingError(f"Missing attribute '{what}' in {report}")
    try:
        return int(value)
    except ValueError as e:
        raise ProcessingError(f"Invalid value '{value}' for '{what}' in {report}") from e
