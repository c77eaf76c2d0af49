"""Coverage report assembly and serialization."""

from covsubmit.report.assembler import CoverageRecord, MergePolicy, ReportAssembler, merge_hits
from covsubmit.report.job import Job, detect_job
from covsubmit.report.writer import write_report

__all__ = [
    "CoverageRecord",
    "Job",
    "MergePolicy",
    "ReportAssembler",
    "detect_job",
    "merge_hits",
    "write_report",
]
