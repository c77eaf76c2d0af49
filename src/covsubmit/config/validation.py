"""Configuration validation for covsubmit.

Validates configuration keys and value types. Unknown keys produce warnings
with a suggested correction; type mismatches and invalid values are errors.
"""

from __future__ import annotations

import codecs
from dataclasses import dataclass
from difflib import get_close_matches
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

import yaml

from covsubmit.core.logging import get_logger

LOGGER = get_logger(__name__)


class ValidationSeverity(Enum):
    """Severity level for validation issues."""

    ERROR = "error"  # Config will fail at runtime
    WARNING = "warning"  # Likely mistake but config usable


@dataclass
class ConfigValidationIssue:
    """A validation issue for configuration with severity."""

    message: str
    source: str
    severity: ValidationSeverity
    key: Optional[str] = None
    suggestion: Optional[str] = None


@dataclass
class ConfigValidationWarning:
    """A validation warning for configuration."""

    message: str
    source: str
    key: Optional[str] = None
    suggestion: Optional[str] = None


# Valid top-level keys
VALID_TOP_LEVEL_KEYS: Set[str] = {
    "coveralls_url",
    "repo_token",
    "service_name",
    "service_job_id",
    "service_number",
    "service_pull_request",
    "branch",
    "parallel",
    "source_encoding",
    "format",
    "coverage_file",
    "json_file",
    "merge_policy",
    "insecure_tls",
    "timeouts",
    "dry_run",
}

# Valid keys under timeouts section
VALID_TIMEOUT_KEYS: Set[str] = {
    "connect",
    "read",
}

STRING_KEYS: Set[str] = {
    "coveralls_url",
    "repo_token",
    "service_name",
    "service_job_id",
    "service_number",
    "service_pull_request",
    "branch",
    "source_encoding",
    "coverage_file",
    "json_file",
}

BOOLEAN_KEYS: Set[str] = {
    "parallel",
    "insecure_tls",
    "dry_run",
}

# Supported report formats
VALID_FORMATS: Set[str] = {
    "jacoco",
    "cobertura",
}

# How hit counts of one line reported by several artifacts combine
VALID_MERGE_POLICIES: Set[str] = {
    "sum",
    "any",
}

# Phrases marking a warning as an error in validate_config_file
_ERROR_PHRASES = (
    "must be a",
    "must be positive",
    "Invalid value",
    "Config must be",
)


def validate_config(
    data: Dict[str, Any],
    source: str,
) -> List[ConfigValidationWarning]:
    """Validate configuration dictionary.

    Does not raise exceptions - returns warnings instead.

    Args:
        data: Config dictionary to validate.
        source: Source file path for warning messages.

    Returns:
        List of validation warnings.
    """
    warnings: List[ConfigValidationWarning] = []

    if not isinstance(data, dict):  # type: ignore[unreachable]
        warnings.append(ConfigValidationWarning(
            message=f"Config must be a mapping, got {type(data).__name__}",
            source=source,
        ))
        return warnings  # type: ignore[unreachable]

    for key in data.keys():
        if key not in VALID_TOP_LEVEL_KEYS:
            suggestion = _suggest_key(key, VALID_TOP_LEVEL_KEYS)
            warning = ConfigValidationWarning(
                message=f"Unknown top-level key '{key}'",
                source=source,
                key=key,
                suggestion=suggestion,
            )
            warnings.append(warning)
            _log_warning(warning)

    for key in sorted(STRING_KEYS):
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            warnings.append(ConfigValidationWarning(
                message=f"'{key}' must be a string, got {type(value).__name__}",
                source=source,
                key=key,
            ))

    for key in sorted(BOOLEAN_KEYS):
        value = data.get(key)
        if value is not None and not isinstance(value, bool):
            warnings.append(ConfigValidationWarning(
                message=f"'{key}' must be a boolean",
                source=source,
                key=key,
            ))

    url = data.get("coveralls_url")
    if isinstance(url, str) and not url.startswith(("https://", "http://")):
        warnings.append(ConfigValidationWarning(
            message=f"Invalid value '{url}' for 'coveralls_url', expected an http(s) URL",
            source=source,
            key="coveralls_url",
        ))

    encoding = data.get("source_encoding")
    if isinstance(encoding, str):
        try:
            codecs.lookup(encoding)
        except LookupError:
            warnings.append(ConfigValidationWarning(
                message=f"Invalid value '{encoding}' for 'source_encoding', unknown text encoding",
                source=source,
                key="source_encoding",
            ))

    format_name = data.get("format")
    if format_name is not None:
        if not isinstance(format_name, str):
            warnings.append(ConfigValidationWarning(
                message="'format' must be a string",
                source=source,
                key="format",
            ))
        elif format_name not in VALID_FORMATS:
            warning = ConfigValidationWarning(
                message=f"Invalid value '{format_name}' for 'format'. "
                        f"Valid values: {', '.join(sorted(VALID_FORMATS))}",
                source=source,
                key="format",
                suggestion=_suggest_key(format_name, VALID_FORMATS),
            )
            warnings.append(warning)
            _log_warning(warning)

    merge_policy = data.get("merge_policy")
    if merge_policy is not None:
        if not isinstance(merge_policy, str):
            warnings.append(ConfigValidationWarning(
                message="'merge_policy' must be a string",
                source=source,
                key="merge_policy",
            ))
        elif merge_policy.lower() not in VALID_MERGE_POLICIES:
            warning = ConfigValidationWarning(
                message=f"Invalid value '{merge_policy}' for 'merge_policy'. "
                        f"Valid values: {', '.join(sorted(VALID_MERGE_POLICIES))}",
                source=source,
                key="merge_policy",
                suggestion=_suggest_key(merge_policy.lower(), VALID_MERGE_POLICIES),
            )
            warnings.append(warning)
            _log_warning(warning)

    timeouts = data.get("timeouts")
    if timeouts is not None:
        if not isinstance(timeouts, dict):
            warnings.append(ConfigValidationWarning(
                message=f"'timeouts' must be a mapping, got {type(timeouts).__name__}",
                source=source,
                key="timeouts",
            ))
        else:
            for key, value in timeouts.items():
                if key not in VALID_TIMEOUT_KEYS:
                    suggestion = _suggest_key(key, VALID_TIMEOUT_KEYS)
                    warning = ConfigValidationWarning(
                        message=f"Unknown key 'timeouts.{key}'",
                        source=source,
                        key=f"timeouts.{key}",
                        suggestion=suggestion,
                    )
                    warnings.append(warning)
                    _log_warning(warning)
                elif isinstance(value, bool) or not isinstance(value, (int, float)):
                    warnings.append(ConfigValidationWarning(
                        message=f"'timeouts.{key}' must be a number",
                        source=source,
                        key=f"timeouts.{key}",
                    ))
                elif value <= 0:
                    warnings.append(ConfigValidationWarning(
                        message=f"'timeouts.{key}' must be positive",
                        source=source,
                        key=f"timeouts.{key}",
                    ))

    if data.get("insecure_tls") is True:
        LOGGER.warning(
            f"'insecure_tls' is enabled in {source}: server certificates will not be verified"
        )

    return warnings


def _suggest_key(invalid_key: str, valid_keys: Set[str]) -> Optional[str]:
    """Suggest a valid key for a potential typo.

    Args:
        invalid_key: The invalid key entered.
        valid_keys: Set of valid keys.

    Returns:
        Closest matching valid key, or None if no good match.
    """
    matches = get_close_matches(invalid_key, list(valid_keys), n=1, cutoff=0.6)
    return matches[0] if matches else None


def _log_warning(warning: ConfigValidationWarning) -> None:
    """Log a validation warning."""
    msg = f"{warning.message} in {warning.source}"
    if warning.suggestion:
        msg += f" (did you mean '{warning.suggestion}'?)"
    LOGGER.warning(msg)


def is_error(warning: ConfigValidationWarning) -> bool:
    """Whether a validation finding makes the configuration unusable."""
    return any(phrase in warning.message for phrase in _ERROR_PHRASES)


def validate_config_file(config_path: Path) -> Tuple[bool, List[ConfigValidationIssue]]:
    """Validate a configuration file from disk.

    Checks file existence, YAML syntax, and configuration semantics.

    Args:
        config_path: Path to the configuration file.

    Returns:
        Tuple of (is_valid, issues) where is_valid is False if any errors exist.
    """
    issues: List[ConfigValidationIssue] = []
    source = str(config_path)

    if not config_path.exists():
        issues.append(ConfigValidationIssue(
            message=f"Configuration file not found: {config_path}",
            source=source,
            severity=ValidationSeverity.ERROR,
        ))
        return False, issues

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        issues.append(ConfigValidationIssue(
            message=f"Invalid YAML syntax: {e}",
            source=source,
            severity=ValidationSeverity.ERROR,
        ))
        return False, issues

    if data is None:
        issues.append(ConfigValidationIssue(
            message="Configuration file is empty",
            source=source,
            severity=ValidationSeverity.WARNING,
        ))
        return True, issues

    for warning in validate_config(data, source):
        issues.append(ConfigValidationIssue(
            message=warning.message,
            source=warning.source,
            severity=ValidationSeverity.ERROR if is_error(warning) else ValidationSeverity.WARNING,
            key=warning.key,
            suggestion=warning.suggestion,
        ))

    has_errors = any(issue.severity == ValidationSeverity.ERROR for issue in issues)
    return not has_errors, issues
