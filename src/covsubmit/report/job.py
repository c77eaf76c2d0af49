"""Job metadata for Coveralls submissions.

Detects the CI service from environment variables and combines it with
explicit configuration, which always takes precedence.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from covsubmit.config.loader import ConfigError
from covsubmit.config.models import CovsubmitConfig
from covsubmit.core.logging import get_logger

LOGGER = get_logger(__name__)

REPO_TOKEN_ENV = "COVERALLS_REPO_TOKEN"
SERVICE_NAME_ENV = "COVERALLS_SERVICE_NAME"

# CI service detection definitions
# Format: service_name -> marker variable and field -> environment variable
CI_SERVICES: Dict[str, Dict[str, str]] = {
    "travis-ci": {
        "marker": "TRAVIS",
        "service_job_id": "TRAVIS_JOB_ID",
        "service_number": "TRAVIS_BUILD_NUMBER",
        "branch": "TRAVIS_BRANCH",
        "service_pull_request": "TRAVIS_PULL_REQUEST",
        "commit": "TRAVIS_COMMIT",
    },
    "github": {
        "marker": "GITHUB_ACTIONS",
        "service_job_id": "GITHUB_RUN_ID",
        "service_number": "GITHUB_RUN_NUMBER",
        "branch": "GITHUB_HEAD_REF",
        "commit": "GITHUB_SHA",
    },
    "gitlab-ci": {
        "marker": "GITLAB_CI",
        "service_job_id": "CI_JOB_ID",
        "service_number": "CI_PIPELINE_IID",
        "branch": "CI_COMMIT_REF_NAME",
        "service_pull_request": "CI_MERGE_REQUEST_IID",
        "commit": "CI_COMMIT_SHA",
    },
    "circleci": {
        "marker": "CIRCLECI",
        "service_job_id": "CIRCLE_BUILD_NUM",
        "service_number": "CIRCLE_BUILD_NUM",
        "branch": "CIRCLE_BRANCH",
        "service_pull_request": "CIRCLE_PR_NUMBER",
        "commit": "CIRCLE_SHA1",
    },
    "jenkins": {
        "marker": "JENKINS_URL",
        "service_job_id": "BUILD_ID",
        "service_number": "BUILD_NUMBER",
        "branch": "GIT_BRANCH",
        "service_pull_request": "CHANGE_ID",
        "commit": "GIT_COMMIT",
    },
    "bamboo": {
        "marker": "bamboo_buildKey",
        "service_job_id": "bamboo_buildResultKey",
        "service_number": "bamboo_buildNumber",
        "branch": "bamboo_planRepository_branch",
        "commit": "bamboo_planRepository_revision",
    },
}

_GITHUB_PR_REF = re.compile(r"^refs/pull/(\d+)/")


@dataclass
class Job:
    """Identifies the build a coverage report belongs to."""

    repo_token: Optional[str] = None
    service_name: Optional[str] = None
    service_job_id: Optional[str] = None
    service_number: Optional[str] = None
    service_pull_request: Optional[str] = None
    branch: Optional[str] = None
    commit: Optional[str] = None
    parallel: bool = False
    dry_run: bool = False
    run_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def validate(self) -> None:
        """Check the job can be identified by the Coveralls API.

        Raises:
            ConfigError: If neither a repo token nor a service job is set.
        """
        if self.dry_run:
            return
        if self.repo_token:
            return
        if self.service_name and self.service_job_id:
            return
        raise ConfigError(
            "Either repo_token or service_name and service_job_id must be defined "
            f"(set {REPO_TOKEN_ENV} or configure repo_token)"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Job fields of the Coveralls document, without unset values."""
        result: Dict[str, Any] = {}
        for key in ("repo_token", "service_name", "service_job_id", "service_number", "service_pull_request"):
            value = getattr(self, key)
            if value:
                result[key] = value
        if self.branch:
            result["service_branch"] = self.branch
        if self.parallel:
            result["parallel"] = True
        result["run_at"] = self.run_at.isoformat()
        if self.commit:
            git: Dict[str, Any] = {"head": {"id": self.commit}}
            if self.branch:
                git["branch"] = self.branch
            result["git"] = git
        return result


def detect_service(env: Mapping[str, str]) -> Dict[str, str]:
    """Read job fields of the CI service the process runs on, if any."""
    for service_name, variables in CI_SERVICES.items():
        if not env.get(variables["marker"]):
            continue

        detected = {"service_name": service_name}
        for key, variable in variables.items():
            if key == "marker":
                continue
            value = env.get(variable)
            if value:
                detected[key] = value

        if service_name == "travis-ci" and detected.get("service_pull_request") == "false":
            del detected["service_pull_request"]
        if service_name == "github":
            if "branch" not in detected and env.get("GITHUB_REF_NAME"):
                detected["branch"] = env["GITHUB_REF_NAME"]
            match = _GITHUB_PR_REF.match(env.get("GITHUB_REF", ""))
            if match:
                detected["service_pull_request"] = match.group(1)
        if service_name == "jenkins" and "branch" not in detected and env.get("BRANCH_NAME"):
            detected["branch"] = env["BRANCH_NAME"]

        LOGGER.debug(f"Detected CI service {service_name}")
        return detected
    return {}


def detect_job(config: CovsubmitConfig, env: Optional[Mapping[str, str]] = None) -> Job:
    """Build the Job from configuration and the CI environment.

    Args:
        config: Loaded configuration; configured values win over detected ones.
        env: Environment variables (defaults to os.environ).
    """
    env = os.environ if env is None else env
    detected = detect_service(env)

    def pick(key: str) -> Optional[str]:
        return getattr(config, key) or detected.get(key)

    return Job(
        repo_token=config.repo_token or env.get(REPO_TOKEN_ENV) or None,
        service_name=config.service_name or env.get(SERVICE_NAME_ENV) or detected.get("service_name"),
        service_job_id=pick("service_job_id"),
        service_number=pick("service_number"),
        service_pull_request=pick("service_pull_request"),
        branch=pick("branch"),
        commit=detected.get("commit"),
        parallel=config.parallel,
        dry_run=config.dry_run,
    )
