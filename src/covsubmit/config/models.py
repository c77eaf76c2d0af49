"""Typed configuration for covsubmit."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

DEFAULT_COVERALLS_URL = "https://coveralls.io/api/v1/jobs"
DEFAULT_JSON_FILE = "target/coveralls.json"
DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_READ_TIMEOUT = 60.0


@dataclass
class TimeoutConfig:
    """HTTP timeouts in seconds."""

    connect: float = DEFAULT_CONNECT_TIMEOUT
    read: float = DEFAULT_READ_TIMEOUT


@dataclass
class CovsubmitConfig:
    """Complete covsubmit configuration."""

    coveralls_url: str = DEFAULT_COVERALLS_URL
    repo_token: Optional[str] = None
    service_name: Optional[str] = None
    service_job_id: Optional[str] = None
    service_number: Optional[str] = None
    service_pull_request: Optional[str] = None
    branch: Optional[str] = None
    parallel: bool = False
    source_encoding: str = "utf-8"
    format: str = "jacoco"
    coverage_file: Optional[str] = None
    json_file: str = DEFAULT_JSON_FILE
    merge_policy: str = "sum"
    insecure_tls: bool = False
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    dry_run: bool = False

    # Where the configuration came from, for diagnostics.
    _config_sources: List[str] = field(default_factory=list, repr=False)

    @property
    def config_sources(self) -> List[str]:
        return list(self._config_sources)
