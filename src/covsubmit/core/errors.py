"""Error taxonomy for covsubmit.

- ProcessingError: malformed coverage reports or service responses, and
  application-level rejection by the Coveralls API.
- SubmissionError: transport failures while uploading or reading the
  response. Subclasses OSError so callers handling I/O errors catch it.
- BuildOrderError: the module graph cannot be resolved.
"""

from __future__ import annotations


class CovsubmitError(Exception):
    """Base class for covsubmit errors."""


class ProcessingError(CovsubmitError):
    """A report or response could not be processed."""


class SubmissionError(CovsubmitError, OSError):
    """Transport-level failure talking to the Coveralls API."""


class BuildOrderError(CovsubmitError):
    """The build order could not be resolved."""
