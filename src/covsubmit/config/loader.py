"""Configuration file loading and merging.

Handles loading configuration from YAML files with:
- Project-level config (.covsubmit.yml)
- Global config (~/.covsubmit/config.yml)
- Environment variable expansion (${VAR})
- Config merging with proper precedence
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from covsubmit.config.models import CovsubmitConfig, TimeoutConfig
from covsubmit.config.validation import is_error, validate_config
from covsubmit.core.errors import CovsubmitError
from covsubmit.core.logging import get_logger
from covsubmit.core.paths import get_covsubmit_home

LOGGER = get_logger(__name__)

# Config file names
PROJECT_CONFIG_NAMES = [".covsubmit.yml", ".covsubmit.yaml", "covsubmit.yml", "covsubmit.yaml"]
GLOBAL_CONFIG_NAME = "config.yml"

# Environment variable pattern: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


class ConfigError(CovsubmitError):
    """Configuration loading or parsing error."""

    pass


def load_config(
    project_root: Path,
    cli_config_path: Optional[Path] = None,
    cli_overrides: Optional[Dict[str, Any]] = None,
) -> CovsubmitConfig:
    """Load configuration with proper precedence.

    Precedence (highest to lowest):
    1. CLI flags (cli_overrides)
    2. Custom config file (cli_config_path) OR project config (.covsubmit.yml)
    3. Global config (~/.covsubmit/config.yml)
    4. Built-in defaults

    Args:
        project_root: Project root directory for finding .covsubmit.yml.
        cli_config_path: Optional path to custom config file (--config flag).
        cli_overrides: Dict of CLI flag overrides.

    Returns:
        Merged CovsubmitConfig instance.

    Raises:
        ConfigError: If specified config file doesn't exist, has parse
            errors, or contains invalid values.
    """
    sources: List[str] = []
    merged: Dict[str, Any] = {}

    # Layer 1: Global config
    global_path = find_global_config()
    if global_path and global_path.exists():
        try:
            global_dict = load_yaml_file(global_path)
            _check(global_dict, str(global_path))
            merged = merge_configs(merged, global_dict)
            sources.append(f"global:{global_path}")
            LOGGER.debug(f"Loaded global config from {global_path}")
        except (ConfigError, yaml.YAMLError) as e:
            LOGGER.warning(f"Failed to load global config: {e}")

    # Layer 2: Project or custom config
    if cli_config_path:
        if not cli_config_path.exists():
            raise ConfigError(f"Config file not found: {cli_config_path}")
        config_path: Optional[Path] = cli_config_path
        kind = "custom"
    else:
        config_path = find_project_config(project_root)
        kind = "project"

    if config_path and config_path.exists():
        try:
            project_dict = load_yaml_file(config_path)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        _check(project_dict, str(config_path))
        merged = merge_configs(merged, project_dict)
        sources.append(f"{kind}:{config_path}")
        LOGGER.debug(f"Loaded {kind} config from {config_path}")

    # Layer 3: CLI overrides
    if cli_overrides:
        merged = merge_configs(merged, cli_overrides)
        sources.append("cli")
        LOGGER.debug("Applied CLI overrides")

    config = dict_to_config(merged)
    config._config_sources = sources

    LOGGER.debug(f"Config loaded from sources: {sources}")
    return config


def _check(data: Dict[str, Any], source: str) -> None:
    """Raise ConfigError for validation errors; warnings are only logged."""
    errors = [w for w in validate_config(data, source=source) if is_error(w)]
    if errors:
        raise ConfigError("; ".join(f"{w.message} in {w.source}" for w in errors))


def find_project_config(project_root: Path) -> Optional[Path]:
    """Find config file in project root.

    Searches for .covsubmit.yml, .covsubmit.yaml, covsubmit.yml, covsubmit.yaml
    in the project root directory.

    Args:
        project_root: Directory to search in.

    Returns:
        Path to config file if found, None otherwise.
    """
    for name in PROJECT_CONFIG_NAMES:
        config_path = project_root / name
        if config_path.exists():
            return config_path
    return None


def find_global_config() -> Optional[Path]:
    """Find global config at ~/.covsubmit/config.yml.

    Returns:
        Path to global config if it exists, None otherwise.
    """
    config_path = get_covsubmit_home() / GLOBAL_CONFIG_NAME
    if config_path.exists():
        return config_path
    return None


def load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML config file.

    Performs environment variable expansion on string values.

    Args:
        path: Path to YAML file.

    Returns:
        Parsed dictionary.

    Raises:
        yaml.YAMLError: If YAML parsing fails.
        FileNotFoundError: If file doesn't exist.
    """
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    data = yaml.safe_load(content)

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a YAML mapping, got {type(data).__name__}")

    return expand_env_vars(data)


def expand_env_vars(data: Any) -> Any:
    """Recursively expand environment variables in config values.

    Supports ${VAR} and ${VAR:-default} syntax.

    Args:
        data: Config data (dict, list, or scalar).

    Returns:
        Data with environment variables expanded.
    """
    if isinstance(data, dict):
        return {k: expand_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        return ENV_VAR_PATTERN.sub(_env_var_replacer, data)
    else:
        return data


def _env_var_replacer(match: re.Match[str]) -> str:
    """Replace environment variable reference with its value."""
    var_name = match.group(1)
    default_value = match.group(2)

    value = os.environ.get(var_name)
    if value is not None:
        return value
    if default_value is not None:
        return default_value

    LOGGER.warning(f"Environment variable ${var_name} is not set and has no default")
    return ""


def merge_configs(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two config dicts, with overlay taking precedence.

    Rules:
    - Scalar values: overlay replaces base
    - Lists: overlay replaces base (no merging)
    - Dicts: recursive merge

    Args:
        base: Base configuration dictionary.
        overlay: Overlay configuration to merge on top.

    Returns:
        Merged configuration dictionary.
    """
    result = base.copy()

    for key, overlay_value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(overlay_value, dict):
            result[key] = merge_configs(result[key], overlay_value)
        else:
            result[key] = overlay_value

    return result


def _optional_str(value: Any) -> Optional[str]:
    """Empty strings (e.g. unset ${VAR}) count as not configured."""
    if value is None or value == "":
        return None
    return str(value)


def dict_to_config(data: Dict[str, Any]) -> CovsubmitConfig:
    """Convert validated dict to typed CovsubmitConfig.

    Args:
        data: Configuration dictionary.

    Returns:
        Typed CovsubmitConfig instance.
    """
    defaults = CovsubmitConfig()

    timeouts_data = data.get("timeouts", {}) or {}
    timeouts = TimeoutConfig(
        connect=float(timeouts_data.get("connect", defaults.timeouts.connect)),
        read=float(timeouts_data.get("read", defaults.timeouts.read)),
    )

    return CovsubmitConfig(
        coveralls_url=_optional_str(data.get("coveralls_url")) or defaults.coveralls_url,
        repo_token=_optional_str(data.get("repo_token")),
        service_name=_optional_str(data.get("service_name")),
        service_job_id=_optional_str(data.get("service_job_id")),
        service_number=_optional_str(data.get("service_number")),
        service_pull_request=_optional_str(data.get("service_pull_request")),
        branch=_optional_str(data.get("branch")),
        parallel=bool(data.get("parallel", defaults.parallel)),
        source_encoding=_optional_str(data.get("source_encoding")) or defaults.source_encoding,
        format=_optional_str(data.get("format")) or defaults.format,
        coverage_file=_optional_str(data.get("coverage_file")),
        json_file=_optional_str(data.get("json_file")) or defaults.json_file,
        merge_policy=(_optional_str(data.get("merge_policy")) or defaults.merge_policy).lower(),
        insecure_tls=bool(data.get("insecure_tls", defaults.insecure_tls)),
        timeouts=timeouts,
        dry_run=bool(data.get("dry_run", defaults.dry_run)),
    )


def get_default_config() -> CovsubmitConfig:
    """Get default configuration.

    Returns:
        Default CovsubmitConfig instance.
    """
    return CovsubmitConfig()
