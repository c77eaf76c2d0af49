"""Coverage report assembly.

ReportAssembler is the SourceCallback every parser feeds. It merges the
records of all parsed artifacts per source file and renders the Coveralls
job document.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from covsubmit.core.logging import get_logger
from covsubmit.parsers.base import FileCoverage
from covsubmit.report.job import Job

LOGGER = get_logger(__name__)


class MergePolicy(str, Enum):
    """How hit counts of a line reported by several artifacts combine."""

    SUM = "sum"  # add execution counts
    ANY = "any"  # 1 if any artifact hit the line, else 0


def merge_hits(
    existing: List[Optional[int]],
    incoming: List[Optional[int]],
    policy: MergePolicy = MergePolicy.SUM,
) -> List[Optional[int]]:
    """Merge two hit arrays line by line.

    A line that is not coverable in one array takes the other's value. The
    result is as long as the longer input.
    """
    size = max(len(existing), len(incoming))
    merged: List[Optional[int]] = []
    for index in range(size):
        a = existing[index] if index < len(existing) else None
        b = incoming[index] if index < len(incoming) else None
        if a is None and b is None:
            merged.append(None)
        elif policy is MergePolicy.ANY:
            merged.append(1 if (a or 0) > 0 or (b or 0) > 0 else 0)
        else:
            merged.append((a or 0) + (b or 0))
    return merged


def _normalize(hits: List[Optional[int]], policy: MergePolicy) -> List[Optional[int]]:
    if policy is MergePolicy.ANY:
        return [None if h is None else (1 if h > 0 else 0) for h in hits]
    return list(hits)


@dataclass
class CoverageRecord:
    """Merged coverage of every source file seen during one run."""

    files: Dict[str, FileCoverage] = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.files)

    def __contains__(self, name: object) -> bool:
        return name in self.files


class ReportAssembler:
    """Accumulates FileCoverage records into a Coveralls job document.

    Instances are callables and can be passed to CoverageParser.parse().
    """

    def __init__(self, merge_policy: MergePolicy = MergePolicy.SUM) -> None:
        self._policy = MergePolicy(merge_policy)
        self._record = CoverageRecord()

    @property
    def merge_policy(self) -> MergePolicy:
        return self._policy

    @property
    def record(self) -> CoverageRecord:
        return self._record

    def __call__(self, coverage: FileCoverage) -> None:
        """Add one parsed file, merging with earlier data for the same file."""
        if coverage.source is None:
            if coverage.name not in self._record.skipped:
                LOGGER.warning(f"Source for {coverage.name} not found, skipping its coverage")
                self._record.skipped.append(coverage.name)
            return

        existing = self._record.files.get(coverage.name)
        if existing is None:
            self._record.files[coverage.name] = FileCoverage(
                name=coverage.name,
                hits=_normalize(coverage.hits, self._policy),
                source=coverage.source,
            )
            return

        LOGGER.debug(f"Merging coverage of {coverage.name} ({self._policy.value})")
        existing.hits = merge_hits(existing.hits, coverage.hits, self._policy)

    def files(self) -> List[FileCoverage]:
        """Merged files sorted by name."""
        return [self._record.files[name] for name in sorted(self._record.files)]

    def build_document(self, job: Job) -> Dict[str, Any]:
        """Render the Coveralls job document.

        Args:
            job: Job metadata identifying the build.

        Returns:
            JSON-serializable dictionary.
        """
        document = job.to_dict()
        document["source_files"] = [
            {
                "name": coverage.name,
                "source_digest": coverage.source.digest if coverage.source else None,
                "coverage": coverage.hits,
            }
            for coverage in self.files()
        ]

        relevant = sum(c.relevant_lines for c in self.files())
        covered = sum(c.covered_lines for c in self.files())
        percentage = (covered / relevant * 100) if relevant else 100.0
        LOGGER.info(
            f"Assembled coverage of {len(self._record)} file(s): "
            f"{percentage:.1f}% ({covered}/{relevant} lines)"
        )
        return document
