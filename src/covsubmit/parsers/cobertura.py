"""Cobertura XML coverage parser.

Cobertura reports list classes with the file that declares them; several
classes (inner or top-level) may share one file:

    <coverage>
      <packages>
        <package name="com.example">
          <classes>
            <class name="com.example.Service" filename="com/example/Service.java">
              <lines>
                <line number="12" hits="3" branch="false"/>
              </lines>
            </class>
          </classes>
        </package>
      </packages>
    </coverage>
"""

from __future__ import annotations

from typing import Dict, Iterator, List

from covsubmit.core.errors import ProcessingError
from covsubmit.core.logging import get_logger
from covsubmit.parsers.base import CoverageParser, FileCoverage, parse_int

LOGGER = get_logger(__name__)


class CoberturaParser(CoverageParser):
    """Parser for Cobertura XML reports."""

    @property
    def name(self) -> str:
        """Report format identifier."""
        return "cobertura"

    def records(self) -> Iterator[FileCoverage]:
        root = self._read_xml()
        if root.tag != "coverage":
            raise ProcessingError(
                f"Expected <coverage> root element in {self.coverage_file}, got <{root.tag}>"
            )

        # Merge classes per file before reconciling; order of first appearance.
        order: List[str] = []
        files: Dict[str, Dict[int, int]] = {}
        for cls in root.iter("class"):
            filename = cls.get("filename")
            if not filename:
                raise ProcessingError(f"<class> without filename in {self.coverage_file}")
            filename = filename.replace("\\", "/")
            if filename not in files:
                order.append(filename)
                files[filename] = {}
            line_hits = files[filename]

            for line in cls.findall("lines/line"):
                number = parse_int(line.get("number"), "number", self.coverage_file)
                hits = parse_int(line.get("hits", "0"), "hits", self.coverage_file)
                line_hits[number] = line_hits.get(number, 0) + hits

        for filename in order:
            LOGGER.debug(f"Cobertura: {filename} ({len(files[filename])} coverable lines)")
            yield self._reconcile(filename, files[filename])
