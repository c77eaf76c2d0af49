"""Composite parser used for multi-module aggregation."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Sequence

from covsubmit.core.logging import get_logger
from covsubmit.parsers.base import CoverageParser, FileCoverage, SourceCallback
from covsubmit.sources.loader import SourceLoader

LOGGER = get_logger(__name__)


class MultipleCoverageParser(CoverageParser):
    """Runs several parsers in sequence against one callback.

    Parsers run strictly in the order given, which callers keep equal to the
    module build order, so merging in the callback is reproducible. There is
    no single coverage file in aggregate mode; ``coverage_file`` is the
    project base directory instead.
    """

    def __init__(self, parsers: Sequence[CoverageParser], base_dir: Path) -> None:
        self._parsers: List[CoverageParser] = list(parsers)
        source_loader = self._parsers[0].source_loader if self._parsers else SourceLoader([])
        super().__init__(base_dir, source_loader)

    @property
    def name(self) -> str:
        formats = sorted({p.name for p in self._parsers})
        return "multiple(" + ",".join(formats) + ")"

    @property
    def parsers(self) -> List[CoverageParser]:
        return list(self._parsers)

    def records(self) -> Iterator[FileCoverage]:
        for parser in self._parsers:
            yield from parser.records()

    def parse(self, callback: SourceCallback) -> None:
        LOGGER.debug(f"Parsing {len(self._parsers)} coverage reports in build order")
        for parser in self._parsers:
            parser.parse(callback)
