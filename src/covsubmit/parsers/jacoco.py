"""JaCoCo XML coverage parser.

JaCoCo is a free code coverage library for Java.
https://www.jacoco.org/jacoco/

Report layout (groups are optional and may nest):

    <report name="...">
      <group name="...">
        <package name="com/example">
          <sourcefile name="Service.java">
            <line nr="12" mi="0" ci="3" mb="0" cb="0"/>
            <counter type="LINE" missed="1" covered="4"/>
          </sourcefile>
        </package>
      </group>
    </report>
"""

from __future__ import annotations

from typing import Dict, Iterator

from covsubmit.core.errors import ProcessingError
from covsubmit.core.logging import get_logger
from covsubmit.parsers.base import CoverageParser, FileCoverage, parse_int

LOGGER = get_logger(__name__)


class JaCoCoParser(CoverageParser):
    """Parser for JaCoCo XML reports.

    JaCoCo records covered instructions per line rather than execution
    counts, so a line with any covered instruction (``ci > 0``) counts as one
    hit and a line without as zero.
    """

    @property
    def name(self) -> str:
        """Report format identifier."""
        return "jacoco"

    def records(self) -> Iterator[FileCoverage]:
        root = self._read_xml()
        if root.tag != "report":
            raise ProcessingError(
                f"Expected <report> root element in {self.coverage_file}, got <{root.tag}>"
            )

        for package in root.iter("package"):
            package_name = package.get("name", "")

            for sourcefile in package.findall("sourcefile"):
                source_name = sourcefile.get("name")
                if not source_name:
                    raise ProcessingError(
                        f"<sourcefile> without name in package '{package_name}' "
                        f"of {self.coverage_file}"
                    )
                name = f"{package_name}/{source_name}" if package_name else source_name

                line_hits: Dict[int, int] = {}
                for line in sourcefile.findall("line"):
                    nr = parse_int(line.get("nr"), "nr", self.coverage_file)
                    covered = parse_int(line.get("ci", "0"), "ci", self.coverage_file)
                    line_hits[nr] = 1 if covered > 0 else 0

                LOGGER.debug(f"JaCoCo: {name} ({len(line_hits)} coverable lines)")
                yield self._reconcile(name, line_hits)
