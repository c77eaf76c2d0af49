"""Source file loading for coverage reconciliation.

Coverage reports reference files by a path relative to a source root
(e.g. ``com/example/Service.java``). SourceLoader searches the configured
roots in order and caches what it finds for the rest of the run.
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Dict, Iterable, List, Optional

from covsubmit.core.errors import ProcessingError
from covsubmit.core.logging import get_logger

LOGGER = get_logger(__name__)

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def count_lines(text: str) -> int:
    """Count lines the way a compiler does.

    Only CR, LF and CRLF end a line. Form feeds and Unicode separators
    are part of the line they appear in. A trailing line break does not
    start another line.
    """
    if not text:
        return 0
    lines = _LINE_BREAK.split(text)
    if lines[-1] == "":
        lines.pop()
    return len(lines)


@dataclass(frozen=True)
class SourceFile:
    """Loaded source text for a single file."""

    name: str
    source: str
    path: Path
    line_count: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "line_count", count_lines(self.source))

    @property
    def digest(self) -> str:
        """MD5 hex digest of the source text, as expected by Coveralls."""
        return hashlib.md5(self.source.encode("utf-8"), usedforsecurity=False).hexdigest()


class SourceLoader:
    """Loads and caches source files from a list of source roots.

    The cache is owned by a single run; instances are not meant to be
    shared between runs or threads.
    """

    def __init__(self, source_roots: Iterable[Path], encoding: str = "utf-8") -> None:
        """Initialize SourceLoader.

        Args:
            source_roots: Directories searched in order for source files.
            encoding: Text encoding used to decode source files.
        """
        self._roots: List[Path] = [Path(root) for root in source_roots]
        self._encoding = encoding
        self._cache: Dict[str, Optional[SourceFile]] = {}

    @property
    def source_roots(self) -> List[Path]:
        return list(self._roots)

    @property
    def encoding(self) -> str:
        return self._encoding

    def has_source(self, name: str) -> bool:
        """Whether source text is available for ``name``."""
        return self.find(name) is not None

    def load(self, name: str) -> SourceFile:
        """Load source text for ``name``.

        Raises:
            FileNotFoundError: If no source root contains the file.
            ProcessingError: If the file cannot be decoded.
        """
        source_file = self.find(name)
        if source_file is None:
            raise FileNotFoundError(
                f"No source found for {name} in {', '.join(str(r) for r in self._roots) or '<no source roots>'}"
            )
        return source_file

    def find(self, name: str) -> Optional[SourceFile]:
        """Return the cached or freshly loaded source file, or None if unknown."""
        if name in self._cache:
            return self._cache[name]

        source_file = None
        path = self._locate(name)
        if path is not None:
            try:
                text = path.read_text(encoding=self._encoding)
            except UnicodeDecodeError as e:
                raise ProcessingError(
                    f"Cannot decode {path} with encoding {self._encoding}: {e}"
                ) from e
            except LookupError as e:
                raise ProcessingError(f"Unknown source encoding {self._encoding}: {e}") from e
            source_file = SourceFile(name=name, source=text, path=path)
            LOGGER.debug(f"Loaded source {name} from {path}")
        else:
            LOGGER.debug(f"Source {name} not found in any source root")

        self._cache[name] = source_file
        return source_file

    def _locate(self, name: str) -> Optional[Path]:
        relative = PurePosixPath(name.replace("\\", "/"))
        if relative.is_absolute() or ".." in relative.parts:
            return None

        for root in self._roots:
            candidate = root.joinpath(*relative.parts)
            if candidate.is_file():
                return candidate
        return None
