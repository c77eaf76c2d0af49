"""Home directory resolution for covsubmit."""

from __future__ import annotations

import os
from pathlib import Path

# Default directory name under user home
DEFAULT_HOME_DIR_NAME = ".covsubmit"

# Environment variable to override home directory
COVSUBMIT_HOME_ENV = "COVSUBMIT_HOME"


def get_covsubmit_home() -> Path:
    """Get the covsubmit home directory path.

    Resolution order:
    1. COVSUBMIT_HOME environment variable (if set)
    2. ~/.covsubmit (default)

    Returns:
        Path to the covsubmit home directory.
    """
    env_home = os.environ.get(COVSUBMIT_HOME_ENV)
    if env_home:
        return Path(env_home)
    return Path.home() / DEFAULT_HOME_DIR_NAME
