"""Coveralls JSON document writer."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from covsubmit.core.logging import get_logger

LOGGER = get_logger(__name__)


def write_report(document: Dict[str, Any], path: Path) -> Path:
    """Write the job document as UTF-8 JSON.

    Args:
        document: Coveralls job document.
        path: Destination file; parent directories are created.

    Returns:
        The written path.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(document, f, ensure_ascii=False)
        f.write("\n")

    LOGGER.debug(f"Wrote Coveralls report with {len(document.get('source_files', []))} file(s) to {path}")
    return path
