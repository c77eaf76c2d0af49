"""HTTP submission to the Coveralls API."""

from covsubmit.http.client import CoverallsClient, SubmissionResult
from covsubmit.http.tls import TlsPolicy

__all__ = ["CoverallsClient", "SubmissionResult", "TlsPolicy"]
