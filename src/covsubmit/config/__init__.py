"""Configuration loading for covsubmit."""

from covsubmit.config.loader import ConfigError, load_config
from covsubmit.config.models import CovsubmitConfig, TimeoutConfig

__all__ = ["ConfigError", "CovsubmitConfig", "TimeoutConfig", "load_config"]
