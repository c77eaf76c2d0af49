"""Bridge between CLI arguments and configuration models."""

from __future__ import annotations

import argparse
from typing import Any, Dict

from covsubmit.core.logging import get_logger

LOGGER = get_logger(__name__)

# CLI attribute -> config key, for plain value options
_VALUE_OPTIONS = {
    "format": "format",
    "coverage_file": "coverage_file",
    "source_encoding": "source_encoding",
    "json_file": "json_file",
    "repo_token": "repo_token",
    "coveralls_url": "coveralls_url",
    "merge_policy": "merge_policy",
}


class ConfigBridge:
    """Translates CLI arguments to configuration objects."""

    @staticmethod
    def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
        """Convert CLI arguments to config override dict.

        CLI arguments take precedence over config file values. Only options
        given explicitly on the command line are included.

        Args:
            args: Parsed CLI arguments.

        Returns:
            Dictionary of config overrides.
        """
        overrides: Dict[str, Any] = {}

        for attr, key in _VALUE_OPTIONS.items():
            value = getattr(args, attr, None)
            if value is not None:
                overrides[key] = value

        if getattr(args, "dry_run", False):
            overrides["dry_run"] = True

        if getattr(args, "insecure_tls", False):
            overrides["insecure_tls"] = True

        if overrides:
            LOGGER.debug(f"CLI overrides: {sorted(overrides)}")
        return overrides
