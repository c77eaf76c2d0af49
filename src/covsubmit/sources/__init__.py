"""Source file loading."""

from covsubmit.sources.loader import SourceFile, SourceLoader

__all__ = ["SourceFile", "SourceLoader"]
